"""Module entrypoint for `python -m repofeed`.

Usage:
    ```bash
    python -m repofeed moses-y --out repos.json
    ```
"""

from .cli import main

if __name__ == "__main__":
    main()
