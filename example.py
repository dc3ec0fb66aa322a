#!/usr/bin/env python3
"""
Example usage of the JSON Mapper.

This script demonstrates how to declare mapped dataclasses and convert
them to and from JSON with an ObjectMapper.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from src.json_mapper import (
    ObjectMapper,
    MappingError,
    json_property,
    json_value,
)


class Theme(Enum):
    DARK = 1
    LIGHT = 2

    @json_value
    def label(self) -> str:
        return self.name.lower()


@dataclass
class Profile:
    age: int = json_property(default=0)
    city: Optional[str] = json_property()
    interests: List[str] = json_property(default_factory=list)


@dataclass
class User:
    user_id: str = json_property(name="id", required=True)
    name: str = json_property(required=True)
    email: Optional[str] = json_property(default=None)
    theme: Theme = json_property(default=Theme.LIGHT)
    profile: Optional[Profile] = json_property(default=None)
    settings: Any = json_property(default_factory=dict)
    session_token: str = field(default="")


def main():
    """Main example function."""
    print("JSON Mapper Example")
    print("=" * 50)

    mapper = ObjectMapper(enable_profiling=True)

    user = User(
        user_id="user_001",
        name="Alice Johnson",
        email="alice@example.com",
        theme=Theme.DARK,
        profile=Profile(age=30, city="New York", interests=["reading", "hiking"]),
        settings={"notifications": True, "privacy": "public"},
        session_token="not serialized"
    )

    print("\nMapped fields of User:")
    for descriptor in mapper.describe(User):
        print(f"  {descriptor.name:<10} -> {descriptor.attribute:<10} {descriptor.shape.describe()}")

    text = mapper.write_value_as_string(user)
    print(f"\nSerialized:\n{text}")

    restored = mapper.read_value(text, User)
    print(f"\nRestored: {restored}")
    print(f"Unmapped session_token restored as default: {restored.session_token!r}")

    tree = mapper.convert_value(user.profile, dict)
    print(f"\nProfile as a JSON tree: {tree}")

    print("\nError handling:")
    for bad_input in ('{"name": "Bob"}', '{"id": "u2", "name": "Bob", "theme": "blue"}', '{"id": '):
        try:
            mapper.read_value(bad_input, User)
        except MappingError as e:
            response = mapper.error_handler.handle_mapping_error(e)
            print(f"  {type(e).__name__}: {e}")
            print(f"    Suggested action: {response.suggested_action}")

    print("\nPerformance:")
    print(mapper.profiler.export_metrics("summary"))


if __name__ == "__main__":
    main()
