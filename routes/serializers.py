from models import User, Note


def _iso(value):
    return value.isoformat() if value else None


def serialize_user(u: User) -> dict:
    return {
        "id":          str(u.id),
        "email":       u.email,
        "name":        u.name,
        "dateOfBirth": _iso(u.date_of_birth),
        "avatar":      u.avatar,
        "isVerified":  u.is_verified,
        "createdAt":   _iso(u.created_at),
        "updatedAt":   _iso(u.updated_at),
    }


def serialize_note(n: Note) -> dict:
    return {
        "id":        str(n.id),
        "title":     n.title,
        "content":   n.content or "",
        "completed": bool(n.completed),
        "userId":    str(n.user_id),
        "createdAt": _iso(n.created_at),
        "updatedAt": _iso(n.updated_at),
    }
