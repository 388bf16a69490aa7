"""Categories and tags - the labels a todo can point at."""
from typing import List, Optional, Type, Union

from sqlalchemy.orm import Session

from taskboard.models.domain import Category, Tag
from taskboard.services.context import ActorContext
from taskboard.services.errors import DuplicateResourceError
from taskboard.services.transaction import transaction

Label = Union[Category, Tag]


class TaxonomyService:
    """Per-user categories and tags. Names are unique per user."""

    def __init__(self, db: Session, actor: ActorContext):
        self.db = db
        self.actor = actor

    def list_categories(self) -> List[Category]:
        return self._list(Category)

    def list_tags(self) -> List[Tag]:
        return self._list(Tag)

    def create_category(self, name: str, color: Optional[str] = None) -> Category:
        return self._create(Category, name, color)

    def create_tag(self, name: str, color: Optional[str] = None) -> Tag:
        return self._create(Tag, name, color)

    def _list(self, model: Type[Label]) -> List[Label]:
        return (
            self.db.query(model)
            .filter(model.user_id == self.actor.actor_id)
            .order_by(model.name.asc())
            .all()
        )

    def _create(self, model: Type[Label], name: str, color: Optional[str]) -> Label:
        with transaction(self.db):
            taken = (
                self.db.query(model.id)
                .filter(model.user_id == self.actor.actor_id, model.name == name)
                .first()
            )
            if taken is not None:
                raise DuplicateResourceError(model.__name__, "name")
            label = model(
                user_id=self.actor.actor_id,
                name=name,
                color=color,
                created_at=self.actor.now(),
            )
            self.db.add(label)
            self.db.flush()
        return label
