# Fleet Booking — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.profile import Profile     # noqa
from app.models.vehicle import Vehicle     # noqa
from app.models.booking import Booking     # noqa
