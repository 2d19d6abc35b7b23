"""Example MCP server shipped with the example Power.

Exposes three text tools over stdio.
"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP("example-text-tools")


@mcp.tool()
def echo(text: str) -> str:
    """Echo the input text back unchanged."""
    return text


@mcp.tool()
def transform(text: str, operation: str) -> str:
    """Transform text: uppercase, lowercase, reverse or length."""
    operations = {
        "uppercase": str.upper,
        "lowercase": str.lower,
        "reverse": lambda s: s[::-1],
        "length": lambda s: str(len(s)),
    }
    if operation not in operations:
        msg = f"Unknown operation '{operation}'"
        raise ValueError(msg)
    return operations[operation](text)


@mcp.tool()
def analyze(text: str) -> dict[str, int]:
    """Return word, character and line counts for the text."""
    return {
        "words": len(text.split()),
        "characters": len(text),
        "lines": len(text.splitlines()) or 1,
    }


if __name__ == "__main__":
    mcp.run()
