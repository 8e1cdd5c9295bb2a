# chattrix/models.py
from datetime import datetime
from flask_login import UserMixin
from .extensions import db


# ---------------- User Model ----------------
class User(db.Model, UserMixin):
    __tablename__ = "users"
    user_id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False)  # For login
    full_name = db.Column(db.String(150), nullable=False)
    password = db.Column(db.Text, nullable=False)
    # Opaque avatar reference handed out by the media store
    profile_pic = db.Column(db.String(512), nullable=True)

    created_timestamp = db.Column(db.DateTime, default=datetime.utcnow)
    updated_timestamp = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def get_id(self):
        return str(self.user_id)

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        if self.email:
            return self.email.split('@')[0]
        return f"User{self.user_id}"


# ---------------- Group Models ----------------
group_members = db.Table(
    "group_members",
    db.Column("group_id", db.Integer, db.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.user_id"), primary_key=True),
)


class Group(db.Model):
    __tablename__ = "groups"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    image = db.Column(db.String(512), nullable=True)
    admin_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    admin = db.relationship("User", foreign_keys=[admin_id])
    members = db.relationship("User", secondary=group_members, lazy="selectin", order_by="User.user_id")

    def has_member(self, user_id: int) -> bool:
        return any(m.user_id == user_id for m in self.members)


# ---------------- Message Models ----------------
class Message(db.Model):
    __tablename__ = "messages"

    id = db.Column(db.Integer, primary_key=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False, index=True)
    # Exactly one of receiver_id / group_id is set; never changes after insert
    receiver_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=True, index=True)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id", ondelete="CASCADE"), nullable=True, index=True)
    text = db.Column(db.Text, nullable=True)
    image = db.Column(db.String(512), nullable=True)  # media reference, never interpreted here
    status = db.Column(db.String(20), nullable=False, default="sent", index=True)  # 'sent' | 'delivered' | 'read'
    seen_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    sender = db.relationship("User", foreign_keys=[sender_id])
    reactions = db.relationship(
        "MessageReaction",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="MessageReaction.id",
        lazy="selectin",
    )

    __table_args__ = (
        db.CheckConstraint(
            "(receiver_id IS NOT NULL AND group_id IS NULL) OR (receiver_id IS NULL AND group_id IS NOT NULL)",
            name="ck_message_single_target",
        ),
    )

    @property
    def is_group(self) -> bool:
        return self.group_id is not None


class MessageReaction(db.Model):
    __tablename__ = "message_reactions"
    id = db.Column(db.Integer, primary_key=True)
    message_id = db.Column(db.Integer, db.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False, index=True)
    emoji = db.Column(db.String(32), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    message = db.relationship("Message", back_populates="reactions")

    __table_args__ = (
        db.UniqueConstraint('message_id', 'user_id', name='uq_message_reaction_user'),
    )
