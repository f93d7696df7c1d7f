from .contracts import PartialUpdate, Profile, ProfileStorePort, UpdateProfileRequest
from .service import ProfileService, age_on
from .routes import router as profile_router

__all__ = [
    "PartialUpdate",
    "Profile",
    "ProfileStorePort",
    "UpdateProfileRequest",
    "ProfileService",
    "age_on",
    "profile_router",
]
