from .user import User  # noqa: F401
from .member import Member  # noqa: F401
from .payment_record import PaymentRecord  # noqa: F401
from .notification_log import NotificationLog  # noqa: F401
