"""ORM models. Importing this package registers every table on Base.metadata."""

from cityguide.models.favorite import Favorite
from cityguide.models.place import Place, Review
from cityguide.models.place_update import PlaceUpdate
from cityguide.models.submission import PlaceSubmission
from cityguide.models.user import User

__all__ = ["Favorite", "Place", "PlaceSubmission", "PlaceUpdate", "Review", "User"]
