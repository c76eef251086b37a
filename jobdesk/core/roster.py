"""Helpers for reconciling the authorised roster with stored credentials."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

import yaml

from jobdesk.core.schema import Credential, User

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


def _roster_path() -> Path:
    env_path = os.getenv("JOBDESK_ROSTER_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return CONFIG_DIR / "roster.yaml"


def load_roster(path: Path | None = None) -> tuple[User, ...]:
    """Load the authorised user roster from YAML."""

    path = path or _roster_path()
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}

    default_password = data.get("default_password")
    users: list[User] = []
    for entry in data.get("users") or []:
        record = dict(entry)
        record.setdefault("password", default_password)
        if record["password"] is not None:
            record["password"] = str(record["password"])
        users.append(User.model_validate(record))
    return tuple(users)


def merge_roster(roster: Sequence[User], credentials: Iterable[Credential]) -> list[User]:
    """Apply stored passwords onto the roster.

    Membership, order, names and roles come from ``roster``. A roster entry
    takes the password of the first credential with the same email when
    that credential carries one; emails unknown to the roster are dropped.
    A matching credential without a password keeps the roster default
    rather than leaving the user with no password at all.
    """

    passwords: dict[str, str | None] = {}
    for credential in credentials:
        passwords.setdefault(credential.email, credential.password)

    merged: list[User] = []
    for user in roster:
        stored = passwords.get(user.email)
        if stored is None:
            merged.append(user.model_copy())
        else:
            merged.append(user.model_copy(update={"password": stored}))
    return merged


def parse_credentials(raw: object) -> list[Credential] | None:
    """Read credential records from untrusted JSON, ``None`` if unusable."""

    if not isinstance(raw, list):
        return None
    credentials: list[Credential] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("email"), str):
            continue
        password = item.get("password")
        credentials.append(
            Credential(email=item["email"], password=password if isinstance(password, str) else None)
        )
    return credentials
