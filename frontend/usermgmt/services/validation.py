# usermgmt/services/validation.py
"""
Client-side checks that must run before a request is sent.
"""
from __future__ import annotations
from typing import List, Optional, Sequence

from usermgmt.errors import ValidationFailure
from usermgmt.schemas.user import ImageUpload

REQUIRED_IMAGE_COUNT = 4


def validate_image_set(images: Optional[Sequence[ImageUpload]]) -> List[ImageUpload]:
    """
    Product rule: a profile image set is exactly four images.
    Used by registration and by profile updates that replace the images.
    """
    found = len(images) if images else 0
    if found != REQUIRED_IMAGE_COUNT:
        raise ValidationFailure(
            f"Please upload exactly {REQUIRED_IMAGE_COUNT} images",
            log_detail=f"got {found} images",
        )
    return list(images)
