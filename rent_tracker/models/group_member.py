from sqlalchemy import Column, ForeignKey, Integer, String, DateTime, UniqueConstraint, func
from rent_tracker.db.session import Base
from sqlalchemy.orm import relationship

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member_user"),
    )

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # informational only; groups.admin_id decides who administers the group
    role = Column(String, nullable=False, server_default=ROLE_MEMBER)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="members")
    user = relationship("User")
