def slugify(value: str) -> str:
    return value.lower().replace(" ", "-")


def describe(user) -> str:
    from .models import User

    return f"{User.__name__}: {user.slug}"
