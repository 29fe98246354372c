from app.models.users import UserAuth
from app.models.rooms import Room
from app.models.reviews import Review
from app.models.favorites import Favorite

__all__ = ["UserAuth", "Room", "Review", "Favorite"]
