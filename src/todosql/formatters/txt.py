"""Plain text formatter."""

from todosql.models import Todo


class TxtFormatter:
    """Format todos as markdown-style checklist lines: - [x] 1: text"""

    def format_item(self, item: Todo) -> str:
        return f"- [{item.marker}] {item.id}: {item.description}"

    def format(self, items: list[Todo]) -> str:
        if not items:
            return ""
        return "\n".join(self.format_item(item) for item in items)
