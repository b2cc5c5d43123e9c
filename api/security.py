#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Security Module - bearer token check for maintenance endpoints
"""

import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException

from config.settings import Settings

from .dependencies import get_settings


def verify_cleanup_token(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Require ``Authorization: Bearer <CLEANUP_SECRET>``.

    Raises:
        HTTPException 401: Missing or wrong token.
    """
    expected = f"Bearer {settings.cleanup_secret}"
    if not authorization or not secrets.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
