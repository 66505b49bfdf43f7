"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here for Alembic to detect them
from meetpoll.db.models.poll import Poll  # noqa: F401, E402
from meetpoll.db.models.time_slot import TimeSlot  # noqa: F401, E402
from meetpoll.db.models.participant import Participant  # noqa: F401, E402
from meetpoll.db.models.slot_response import SlotResponse  # noqa: F401, E402
from meetpoll.db.models.email_log import EmailLog  # noqa: F401, E402
