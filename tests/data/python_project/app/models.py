from app.utils import slugify


class User:
    def __init__(self, name: str) -> None:
        self.slug = slugify(name)
