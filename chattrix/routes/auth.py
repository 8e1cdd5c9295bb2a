# chattrix/routes/auth.py
from flask import Blueprint, jsonify, request, current_app
from flask_login import login_user, logout_user, login_required, current_user
from passlib.hash import bcrypt
from sqlalchemy import or_

from chattrix.errors import AuthenticationError, ConflictError
from chattrix.extensions import db
from chattrix.models import User
from chattrix.schemas import LoginInput, ProfileUpdateInput, SignupInput, parse_payload
from chattrix.services.serializers import serialize_user
from chattrix.routes._helpers import acting_identity, json_body

auth_bp = Blueprint("auth_bp", __name__)


@auth_bp.post("/signup")
def signup():
    data = parse_payload(SignupInput, json_body())
    if User.query.filter_by(email=data.email).first():
        raise ConflictError("Email already exists")

    user = User()
    user.email = data.email
    user.full_name = data.full_name
    user.profile_pic = data.profile_pic
    # Hash password with passlib
    user.password = bcrypt.hash(data.password)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    current_app.logger.info("[Auth] New account %s (%s)", user.user_id, user.email)
    return jsonify(serialize_user(user)), 201


@auth_bp.post("/login")
def login():
    data = parse_payload(LoginInput, json_body())
    user = User.query.filter_by(email=data.email).first()
    if not user or not bcrypt.verify(data.password, user.password):
        raise AuthenticationError("Invalid credentials")
    login_user(user)
    return jsonify(serialize_user(user))


@auth_bp.post("/logout")
def logout():
    logout_user()
    return jsonify({"message": "Logged out successfully"})


@auth_bp.get("/check")
@login_required
def check():
    return jsonify(serialize_user(current_user))


@auth_bp.put("/update-profile")
@login_required
def update_profile():
    data = parse_payload(ProfileUpdateInput, json_body())
    user = db.session.get(User, acting_identity().user_id)
    if data.full_name:
        user.full_name = data.full_name
    if data.profile_pic:
        user.profile_pic = data.profile_pic
    db.session.commit()
    return jsonify(serialize_user(user))


@auth_bp.get("/search")
@login_required
def search_users():
    q = (request.args.get("q") or "").strip()
    if not q:
        return jsonify([])
    me = acting_identity()
    pattern = f"%{q}%"
    users = (
        User.query.filter(User.user_id != me.user_id)
        .filter(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
        .order_by(User.full_name.asc())
        .limit(20)
        .all()
    )
    return jsonify([serialize_user(u) for u in users])
