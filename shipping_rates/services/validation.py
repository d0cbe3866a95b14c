"""Turn pydantic validation failures into field-path issue lists."""
from typing import Any, Dict, List

from pydantic import ValidationError


def validation_issues(error: ValidationError) -> List[Dict[str, Any]]:
    """
    Flatten a ValidationError into [{"path", "message", "type"}, ...].

    The path is the dotted field location ("packages.0.weight"); an empty
    path means the value as a whole was rejected.
    """
    return [
        {
            "path": ".".join(str(part) for part in issue["loc"]),
            "message": issue["msg"],
            "type": issue["type"],
        }
        for issue in error.errors(include_url=False)
    ]


def format_validation_issues(issues: List[Dict[str, Any]]) -> str:
    return "; ".join(f"{issue['path'] or '<root>'}: {issue['message']}" for issue in issues)
