# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Local members

Federated identities are reconciled onto Member rows. Email is unique at the
storage layer; a member is created the first time an email is seen and is
never modified by later logins.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .database import Base
from .session import MEMBER_KEY, SessionState

logger = logging.getLogger(__name__)


class MemberProfile(BaseModel):
    """Member fields extracted from a federated attribute set"""
    email: str
    username: str = ''
    first_name: str = ''
    surname: str = ''


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    username = Column(String(256))
    first_name = Column(String(128))
    surname = Column(String(128))
    created = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def login(self, session: SessionState) -> None:
        """Bind this member to the local session"""
        session.set(MEMBER_KEY, self.id)
        logger.info(f"Member {self.id} ({self.email}) logged in")

    def logout(self, session: SessionState) -> None:
        session.clear(MEMBER_KEY)
        logger.info(f"Member {self.id} ({self.email}) logged out")

    def __repr__(self) -> str:
        return f"<Member id={self.id} email={self.email!r}>"


class MemberStore:
    """Query and create members"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, member_id: int) -> Optional[Member]:
        return self.db.get(Member, member_id)

    def get_by_email(self, email: str) -> Optional[Member]:
        return self.db.query(Member).filter(Member.email == email).first()

    def current_member(self, session: SessionState) -> Optional[Member]:
        """Member bound to the session, if any"""
        member_id = session.member_id
        if member_id is None:
            return None
        return self.get(member_id)

    def find_or_create(self, profile: MemberProfile) -> Member:
        """
        Return the member with the profile's email, creating it if absent

        A concurrent request may insert the same email between our lookup
        and our insert; the unique constraint rejects the second insert and
        the existing row is returned instead.
        """
        member = self.get_by_email(profile.email)
        if member is not None:
            return member

        member = Member(
            email=profile.email,
            username=profile.username,
            first_name=profile.first_name,
            surname=profile.surname,
        )
        self.db.add(member)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Member {profile.email} created concurrently, using existing row")
            existing = self.get_by_email(profile.email)
            if existing is None:
                raise
            return existing

        self.db.refresh(member)
        logger.info(f"Created member {member.id} for {member.email}")
        return member
