"""Base repository with common read and insert operations."""
from typing import TypeVar, Generic, Type, Optional, List, Dict, Any, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import desc, asc

from gatekeeper.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common database operations.

    Repositories never commit: services wrap their calls in
    ``gatekeeper.db.base.atomic`` so every unit of work commits or rolls
    back as a whole.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def add(self, db_obj: ModelType) -> ModelType:
        """
        Stage a new record and flush it so defaults and constraints apply.

        Args:
            db_obj: Model instance to insert

        Returns:
            The flushed instance
        """
        self.db.add(db_obj)
        self.db.flush()
        return db_obj

    def get(self, id: Any) -> Optional[ModelType]:
        """
        Get record by ID.

        Args:
            id: Primary key value

        Returns:
            Model instance or None if not found
        """
        return self.db.get(self.model, id)

    def get_multi(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: Optional[str] = None,
        order_desc: bool = True,
        filters: Optional[Dict[str, Any]] = None
    ) -> Tuple[List[ModelType], int]:
        """
        Get multiple records with pagination and filtering.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            order_by: Column name to order by (defaults to 'created_at')
            order_desc: Whether to order descending
            filters: Dictionary of column:value filters; None values are ignored

        Returns:
            Tuple of (list of records, total count)
        """
        query = self.db.query(self.model)

        if filters:
            for column, value in filters.items():
                if value is not None and hasattr(self.model, column):
                    query = query.filter(getattr(self.model, column) == value)

        total = query.count()

        if order_by and hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
        elif hasattr(self.model, 'created_at'):
            order_column = self.model.created_at
        else:
            order_column = self.model.id

        if order_desc:
            query = query.order_by(desc(order_column), desc(self.model.id))
        else:
            query = query.order_by(asc(order_column), asc(self.model.id))

        records = query.offset(skip).limit(limit).all()

        return records, total

    def exists(self, id: Any) -> bool:
        """
        Check if record exists.

        Args:
            id: Primary key value

        Returns:
            True if record exists, False otherwise
        """
        query = self.db.query(self.model.id).filter(self.model.id == id)
        return self.db.query(query.exists()).scalar()
