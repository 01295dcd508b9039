"""Field-format predicates for account data.

All helpers return a bool; callers decide which error to raise.
"""

from __future__ import annotations

import re
from typing import Optional

EMAIL_REGEX = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_REGEX = re.compile(r"\+?[1-9][0-9]{9,14}|0[0-9]{9,10}")
PHONE_SEPARATORS = re.compile(r"[\s-]")
NICKNAME_REGEX = re.compile(r"[가-힣a-zA-Z0-9_]{2,20}")
PASSWORD_REGEX = re.compile(
	r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[@$!%*?&])[A-Za-z0-9@$!%*?&]{8,}"
)


def is_valid_email(email: Optional[str]) -> bool:
	return bool(email) and EMAIL_REGEX.fullmatch(email) is not None


def is_valid_phone_number(phone: Optional[str]) -> bool:
	# Phone numbers are optional on profiles.
	if not phone or not phone.strip():
		return True
	cleaned = PHONE_SEPARATORS.sub("", phone)
	return PHONE_REGEX.fullmatch(cleaned) is not None


def is_valid_nickname(nickname: Optional[str]) -> bool:
	return bool(nickname) and NICKNAME_REGEX.fullmatch(nickname) is not None


def is_valid_password(password: Optional[str]) -> bool:
	return bool(password) and PASSWORD_REGEX.fullmatch(password) is not None
