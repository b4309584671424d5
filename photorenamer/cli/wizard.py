"""Interactive wizard mode for Photo Renamer."""

from typing import Optional


def run_wizard(default_folder: str = "") -> Optional[str]:
    """Ask the user which folder to rename photos in.

    Args:
        default_folder: Folder used when the user just presses Enter
            (normally the last folder used).

    Returns:
        Folder entered by user, or None if cancelled.
    """
    print("\nNo folder was given, so you have been redirected to the Wizard setup")

    prompt = "Enter path to your folder with photos"
    if default_folder:
        prompt += f" [{default_folder}]"

    try:
        path = input(prompt + ": ").strip()
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return None

    return path or default_folder or None


def confirm(question: str) -> bool:
    """Ask a yes/no question; anything but y/yes means no."""
    try:
        answer = input(f"{question} [y/N]: ")
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return False
    return answer.strip().lower() in ("y", "yes")
