"""Point category domain service."""

from typing import Optional

from pointledger.database.base import Database
from pointledger.domain.entities import PointCategory
from pointledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_category,
)


class CategoryService:
    """Service for managing point categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        is_mandatory: Optional[bool] = True,
        is_positive: bool = False,
        default_points: int = 0,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            is_mandatory: Whether negative entries in this category must be
                paid in full. None is stored as unset and treated as mandatory.
            is_positive: Whether the category awards points
            default_points: Suggested points for new entries

        Returns:
            Category ID

        Raises:
            ValidationError: If name is blank or default_points is negative
            ConflictError: If a category with this name exists
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("Category name is required")
        if default_points < 0:
            raise ValidationError("Default points cannot be negative")
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(duplicate_category(name))

        return self.db.create_category(
            name=name,
            is_mandatory=is_mandatory,
            is_positive=is_positive,
            default_points=default_points,
        )

    def get_category(self, category_id: int) -> Optional[PointCategory]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def list_categories(self) -> list[PointCategory]:
        """List all categories."""
        return self.db.list_categories()

    def require_category(self, category: str) -> PointCategory:
        """Resolve a category by ID or name.

        Args:
            category: Numeric ID or exact name

        Returns:
            Category entity

        Raises:
            NotFoundError: If nothing matches
        """
        found = None
        if category.isdigit():
            found = self.db.get_category(int(category))
        if found is None:
            found = self.db.get_category_by_name(category)
        if found is None:
            raise NotFoundError(category_not_found(category))
        return found
