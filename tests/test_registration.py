"""Tests for acts_as_removable on mapped classes."""

from datetime import datetime
from typing import Optional

import pytest
from pydantic import ValidationError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from removable import (
    HookEvent,
    HookPhase,
    Removable,
    RemovableConfigurationError,
    RemovableRegistry,
    acts_as_removable,
    get_registry,
    marker_column,
    removal_callback,
)


class Base(DeclarativeBase):
    pass


class Article(Base, Removable):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(primary_key=True)
    removed_at: Mapped[Optional[datetime]] = marker_column()
    hidden_at: Mapped[Optional[datetime]] = marker_column()
    gone: Mapped[Optional[datetime]] = marker_column(name="gone-at")

    @removal_callback("before_remove")
    def clear_cache(self):
        pass


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    removed_at: Mapped[Optional[datetime]] = marker_column()


@pytest.fixture
def registry():
    return RemovableRegistry()


class TestActsAsRemovable:
    """Test the registration decorator."""

    def test_private_registry(self, registry):
        acts_as_removable(registry=registry)(Article)

        assert registry.is_registered(Article)
        assert Article.is_removable() is True
        assert not get_registry().is_registered(Article)

    def test_requires_trait(self):
        with pytest.raises(TypeError, match="must inherit Removable"):
            acts_as_removable(Comment)

    def test_requires_column(self, registry):
        with pytest.raises(RemovableConfigurationError, match="no column 'gone_at'"):
            acts_as_removable(column_name="gone_at", registry=registry)(Article)

        assert not registry.is_registered(Article)

    def test_requires_mapping(self, registry):
        class Unmapped(Removable):
            pass

        with pytest.raises(RemovableConfigurationError, match="not a mapped class"):
            acts_as_removable(registry=registry)(Unmapped)

    def test_blank_column_name(self, registry):
        with pytest.raises(ValidationError):
            acts_as_removable(column_name="  ", registry=registry)(Article)

    def test_unknown_column_name(self, registry):
        with pytest.raises(RemovableConfigurationError, match="no column"):
            acts_as_removable(column_name="not a column", registry=registry)(Article)

    def test_database_column_name(self, registry):
        acts_as_removable(column_name="gone-at", registry=registry)(Article)

        assert Article.removable_options().column_name == "gone-at"
        assert Article.marker_key() == "gone"

    def test_tagged_hooks_registered_once(self, registry):
        acts_as_removable(registry=registry)(Article)
        acts_as_removable(column_name="hidden_at", registry=registry)(Article)

        behavior = registry.behavior_for(Article)
        assert behavior.options.column_name == "hidden_at"
        assert behavior.hooks.callbacks(HookPhase.BEFORE, HookEvent.REMOVE) == [
            "clear_cache"
        ]
        assert Article.marker_key() == "hidden_at"

    def test_reregistration_keeps_omitted_options(self, registry):
        acts_as_removable(column_name="hidden_at", registry=registry)(Article)
        acts_as_removable(validate=True, registry=registry)(Article)

        options = registry.behavior_for(Article).options
        assert options.column_name == "hidden_at"
        assert options.validate_on_remove is True

        acts_as_removable(registry=registry)(Article)

        assert registry.behavior_for(Article).options == options

    def test_reregistration_overrides_given_options(self, registry):
        acts_as_removable(column_name="hidden_at", validate=True, registry=registry)(
            Article
        )
        acts_as_removable(column_name="removed_at", registry=registry)(Article)

        options = registry.behavior_for(Article).options
        assert options.column_name == "removed_at"
        assert options.validate_on_remove is True

    def test_failed_reregistration_keeps_options(self, registry):
        acts_as_removable(column_name="hidden_at", registry=registry)(Article)

        with pytest.raises(RemovableConfigurationError):
            acts_as_removable(column_name="gone_at", registry=registry)(Article)

        assert registry.behavior_for(Article).options.column_name == "hidden_at"


class TestDefaultValidations:
    """Test the rules a model gets when it declares none."""

    def test_default_rules_are_read_only(self):
        with pytest.raises(TypeError):
            Removable.__validations__["name"] = {"presence": True}

        assert Article.__validations__ == {}
