from rich.console import Console

error_console = Console(stderr=True, color_system=None)


def warning(text):
    # Diagnostics may quote file names: no markup interpretation
    error_console.print(text, markup=False, highlight=False, soft_wrap=True)
