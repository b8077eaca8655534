"""Utility functions for sender operations."""


def format_file_size(size_bytes: int) -> str:
    """
    Format byte count as human-readable size.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "256 KB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"


def format_progress(sent: int, total: int) -> str:
    """Progress summary such as '512.0 KB / 1.0 MB (50.0%)'."""
    percent = (sent / total) * 100 if total else 100.0
    return f"{format_file_size(sent)} / {format_file_size(total)} ({percent:.1f}%)"


def receiver_base_url(host: str, port: int) -> str:
    """Base URL of a receiver; IPv6 literals are bracketed."""
    if ':' in host and not host.startswith('['):
        host = f"[{host}]"
    return f"http://{host}:{port}"
