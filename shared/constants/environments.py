from enum import Enum


class Environment(str, Enum):
    """Deployment environments a monitor process can run in."""

    PRODUCTION = "production"
    STAGING = "staging"
    TESTING = "testing"
    DEVELOPMENT = "development"

    @classmethod
    def parse(cls, env: str) -> "Environment":
        """Resolve an environment name case-insensitively.

        Raises ValueError for names that are not a known environment.
        """
        try:
            return cls(env.strip().lower())
        except ValueError:
            known = ", ".join(e.value for e in cls)
            raise ValueError(f"Unknown environment '{env}'. Expected one of: {known}")

    @property
    def structured_logs(self) -> bool:
        # Humans read development output, machines read everything else
        return self is not Environment.DEVELOPMENT
