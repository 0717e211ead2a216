from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ClassKind(Enum):
    """Classification of a class identifier by the rule that resolves it."""

    EXPLICIT = "explicit"                  # registered with register_class()
    GLOBAL_OVERRIDE = "global_override"    # listed in the global class path
    LEGACY_UNDERSCORE = "legacy"           # OC_Foo_Bar
    CORE_NAMESPACE = "core"                # OC\Foo\Bar
    PUBLIC_NAMESPACE = "public"            # OCP\Foo\Bar
    APP_NAMESPACE = "app"                  # OCA\App\Foo
    TEST_UNDERSCORE = "test_legacy"        # Test_Foo_Bar
    TEST_NAMESPACE = "test"                # Test\Foo\Bar
    USER_PREFIX = "user_prefix"            # registered with register_prefix()
    UNMATCHED = "unmatched"


@dataclass
class AppRoot:
    """A directory holding ownCloud apps."""

    path: Path
    url: str = "/apps"
    writable: bool = False
