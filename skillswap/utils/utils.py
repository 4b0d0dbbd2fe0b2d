import os
import uuid

from fastapi import UploadFile

from ..core.config import get_settings
from .logger import get_logger

logger = get_logger(__name__)


def create_user_directory(user_id: int) -> str:
    # Create a directory for the user with their ID
    user_directory = os.path.join(get_settings().MEDIA_ROOT, "profiles", str(user_id))
    if not os.path.exists(user_directory):
        logger.info("Creating directory: %s", user_directory)
        os.makedirs(user_directory)
    return user_directory


async def save_profile_photo(user_id: int, photo: UploadFile) -> dict:
    user_directory = create_user_directory(user_id)
    photo_id = str(uuid.uuid4())
    file_extension = os.path.splitext(photo.filename or "")[1]
    file_location = os.path.join(user_directory, f"{photo_id}{file_extension}")

    with open(file_location, "wb") as f:
        f.write(await photo.read())

    return {"id": photo_id, "url": file_location}


def delete_file(file_path: str):
    if file_path and os.path.exists(file_path):
        os.remove(file_path)
        logger.info("Deleted file: %s", file_path)
