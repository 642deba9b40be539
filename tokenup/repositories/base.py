from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """Base class for all repositories; results are always pydantic schemas.

    Writes take ``commit``: pass ``commit=False`` to compose several writes
    into one transaction and commit from the caller.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def _to_schemas(self, model_instances: List[Any]) -> List[SchemaType]:
        return [self._to_schema(instance) for instance in model_instances]

    def _get_model(self, id: Any) -> Optional[T]:
        # populate_existing so bulk UPDATEs issued earlier in this
        # transaction are visible on rows already in the identity map
        return (
            self.db.query(self.model_class)
            .populate_existing()
            .filter(getattr(self.model_class, "id") == id)
            .first()
        )

    def get_by_id(self, id: Any) -> Optional[SchemaType]:
        return self._to_schema(self._get_model(id))

    def get_by_field(self, field_name: str, value: Any) -> Optional[SchemaType]:
        model_instance = (
            self.db.query(self.model_class)
            .populate_existing()
            .filter(getattr(self.model_class, field_name) == value)
            .first()
        )
        return self._to_schema(model_instance)

    def find_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[SchemaType]:
        query = self.db.query(self.model_class).populate_existing()

        if filters:
            for key, value in filters.items():
                if hasattr(self.model_class, key):
                    query = query.filter(getattr(self.model_class, key) == value)

        if order_by and hasattr(self.model_class, order_by):
            query = query.order_by(getattr(self.model_class, order_by))

        if offset:
            query = query.offset(offset)

        if limit:
            query = query.limit(limit)

        return self._to_schemas(query.all())

    def create(self, commit: bool = True, **kwargs) -> SchemaType:
        instance = self.model_class(**kwargs)
        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._to_schema(instance)

    def update(
        self, instance_id: Any, commit: bool = True, **kwargs
    ) -> Optional[SchemaType]:
        instance = self._get_model(instance_id)
        if not instance:
            return None

        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._to_schema(instance)

    def exists(self, filters: Dict[str, Any]) -> bool:
        query = self.db.query(self.model_class)

        for key, value in filters.items():
            if hasattr(self.model_class, key):
                query = query.filter(getattr(self.model_class, key) == value)

        return query.first() is not None
