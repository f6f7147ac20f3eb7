import operator
from typing import Any, Optional, Sequence, Dict, List

from sqlalchemy import and_, or_, not_, desc, asc, func, update as sql_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db_domains import Base, utc_now
from db_domains.db import Database

DataObject = dict[str, Any]
OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda f, v: f.in_(v),
    "not_in": lambda f, v: ~f.in_(v),
    "like": lambda f, v: f.like(v),
    "ilike": lambda f, v: f.ilike(v),
    "not": lambda f, v: not_(f == v),
}


class RecordNotFound(Exception):
    pass


class DBInterface:
    def __init__(self, db_model: type[Base], database: Database) -> None:
        self.db_class: type[Base] = db_model
        self.database = database

    def _session(self) -> Session:
        return self.database.session()

    # Get Methods
    def build_filter_expression(self, filter_def: Dict[str, Any]):
        if "AND" in filter_def:
            return and_(*[self.build_filter_expression(f) for f in filter_def["AND"]])
        elif "OR" in filter_def:
            return or_(*[self.build_filter_expression(f) for f in filter_def["OR"]])
        elif "NOT" in filter_def:
            return not_(self.build_filter_expression(filter_def["NOT"]))
        elif "field" in filter_def:
            field = getattr(self.db_class, filter_def["field"], None)
            op = filter_def.get("op", "==")
            value = filter_def.get("value")
            if field is None:
                raise ValueError(f"Field '{filter_def['field']}' not found in model {self.db_class.__name__}")
            if op not in OPERATORS:
                raise ValueError(f"Unsupported operator: {op}")
            return OPERATORS[op](field, value)
        else:
            raise ValueError(f"Invalid filter structure: {filter_def}")

    def read_by_id(self, _id: Any) -> Optional[Base]:
        session: Session = self._session()
        try:
            return session.get(self.db_class, _id)
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error reading {self.db_class.__name__} with ID {_id}: {str(e)}") from e
        finally:
            session.close()

    def read_by_fields(self, fields: list, order_by: Optional[Any] = None) -> Sequence[Base]:
        session = self._session()
        try:
            query = session.query(self.db_class).filter(*fields)
            if order_by is not None:
                query = query.order_by(order_by)
            return query.all()
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error reading records by fields in {self.db_class.__name__}: {str(e)}") from e
        finally:
            session.close()

    def read_single_by_fields(self, fields: list) -> Optional[Base]:
        session = self._session()
        try:
            return session.query(self.db_class).filter(*fields).first()
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error reading single record by fields in {self.db_class.__name__}: {str(e)}") from e
        finally:
            session.close()

    def read_all_by_filters(
            self, filter_expr: Optional[Any] = None, order_by: Optional[Any] = None, limit: int = 10, offset: int = 0,
            order_direction: str = "asc"
    ):
        session: Session = self._session()
        try:
            query = session.query(self.db_class)

            if filter_expr is not None:
                query = query.filter(filter_expr)

            if order_by is not None:
                if order_direction == "desc":
                    query = query.order_by(desc(order_by))
                else:
                    query = query.order_by(asc(order_by))

            total_count = query.count()
            query = query.offset(offset).limit(limit)

            results = query.all()
            return results, total_count
        except SQLAlchemyError as e:
            raise Exception(f"Error reading with filters in {self.db_class.__name__}: {str(e)}") from e
        finally:
            session.close()

    # Create Methods
    def create(self, data: dict[str, Any]) -> Base:
        session: Session = self._session()
        try:
            item = self.db_class(**data)
            session.add(item)
            session.commit()
            session.refresh(item)
            return item
        except IntegrityError:
            # Unique constraint violations reach the caller untouched so they can map them to a conflict
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error creating {self.db_class.__name__}: {str(e)}") from e
        finally:
            session.close()

    # Update Methods
    def update(self, _id: Any, data: DataObject) -> Base:
        session = self._session()
        try:
            item: Base = session.get(self.db_class, _id)
            if not item:
                raise RecordNotFound(f"{self.db_class.__name__} with id = {_id} not found")

            for key, value in data.items():
                setattr(item, key, value)

            session.commit()
            session.refresh(item)
            return item
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error updating {self.db_class.__name__} with id = {_id}: {str(e)}") from e
        finally:
            session.close()

    def update_where(self, _id: Any, expected: DataObject, data: DataObject) -> Optional[Base]:
        """
        Conditional update: writes `data` only while every column in `expected` still holds its value.
        Runs as a single UPDATE ... WHERE statement, so of two racing writers exactly one wins.
        Returns the refreshed row, or None when no row matched.
        """
        session = self._session()
        try:
            conditions = [self.db_class.id == _id]
            conditions += [getattr(self.db_class, key) == value for key, value in expected.items()]
            values = dict(data)
            if hasattr(self.db_class, "modified_at"):
                values.setdefault("modified_at", utc_now())

            result = session.execute(
                sql_update(self.db_class).where(*conditions).values(**values).execution_options(
                    synchronize_session=False
                )
            )
            session.commit()
            if result.rowcount == 0:
                return None
            return session.get(self.db_class, _id)
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error updating {self.db_class.__name__} with id = {_id}: {str(e)}") from e
        finally:
            session.close()

    # Delete Methods
    def soft_delete(self, filters: List[Any], modified_id: Optional[int] = None) -> bool:
        session = self._session()
        try:
            items = session.query(self.db_class).filter(*filters).all()
            if not items:
                return False

            for item in items:
                item.is_deleted = True
                if hasattr(item, "is_active"):
                    item.is_active = False
                item.deleted_at = utc_now()
                if modified_id:
                    item.modified_by = modified_id

            session.commit()
            return True

        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error performing soft delete in {self.db_class.__name__}: {str(e)}") from e
        finally:
            session.close()

    def count_all_by_fields(self, filters: list) -> int:
        session = self._session()
        try:
            count = session.query(func.count()).select_from(self.db_class).filter(*filters).scalar()
            return count or 0
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error counting records by fields in {self.db_class.__name__}: {str(e)}") from e
        finally:
            session.close()

    def sum_by_fields(self, column_name: str, filters: list) -> float:
        session = self._session()
        try:
            column = getattr(self.db_class, column_name)
            total = session.query(func.coalesce(func.sum(column), 0)).filter(*filters).scalar()
            return float(total or 0)
        except SQLAlchemyError as e:
            session.rollback()
            raise Exception(f"Error summing {column_name} in {self.db_class.__name__}: {str(e)}") from e
        finally:
            session.close()
