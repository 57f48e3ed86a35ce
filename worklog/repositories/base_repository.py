"""Base repository class with common database operations."""

from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Tuple
from sqlalchemy.orm import Session, Query
from sqlalchemy import func, insert, update, Table
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository providing common CRUD operations."""

    def __init__(self, model: Type[T], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> Optional[T]:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        return self.db.query(self.model).filter(self.model.id == id).first()

    def paginate(self, query: Query, page: int, limit: int) -> Tuple[List[T], int]:
        """
        Apply page/limit to a query.

        Args:
            query: Filtered and ordered query
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (items on the page, total matching rows)
        """
        total = query.order_by(None).count()
        items = query.offset((page - 1) * limit).limit(limit).all()
        return items, total

    def create(self, obj: T) -> T:
        """
        Create new entity.

        Args:
            obj: Entity to create

        Returns:
            Created entity
        """
        self.db.add(obj)
        self.db.flush()
        self.db.refresh(obj)
        return obj

    def update(self, obj: T) -> T:
        """
        Update entity.

        Args:
            obj: Entity to update

        Returns:
            Updated entity
        """
        self.db.flush()
        self.db.refresh(obj)
        return obj

    def delete(self, obj: T) -> None:
        """
        Delete entity.

        Args:
            obj: Entity to delete
        """
        self.db.delete(obj)
        self.db.flush()

    def count(self) -> int:
        """
        Count all entities.

        Returns:
            Number of entities
        """
        return self.db.query(func.count(self.model.id)).scalar()

    def increment(self, id: int, column_name: str, amount: float) -> None:
        """
        Atomically add ``amount`` to a numeric column.

        The addition happens inside the UPDATE statement, so concurrent
        increments never lose each other's writes.

        Args:
            id: Entity ID
            column_name: Name of the numeric column
            amount: Value to add
        """
        column = getattr(self.model, column_name)
        self.db.execute(
            update(self.model)
            .where(self.model.id == id)
            .values({column_name: column + amount})
            .execution_options(synchronize_session=False)
        )

    def insert_ignore(
        self, table: Table, values: Dict[str, Any], conflict_columns: List[str]
    ) -> bool:
        """
        Insert a row unless it collides with a unique key.

        Uses the database's native conflict handling so that two concurrent
        callers can never both insert the same key.

        Args:
            table: Target table
            values: Column values for the new row
            conflict_columns: Columns of the unique key that defines a duplicate

        Returns:
            True if a row was inserted, False if it already existed
        """
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql_insert(table).values(**values).on_conflict_do_nothing(
                index_elements=conflict_columns
            )
        elif dialect == "sqlite":
            stmt = sqlite_insert(table).values(**values).on_conflict_do_nothing(
                index_elements=conflict_columns
            )
        else:
            # MySQL / MariaDB
            stmt = insert(table).values(**values).prefix_with("IGNORE")
        result = self.db.execute(stmt)
        return bool(result.rowcount)
