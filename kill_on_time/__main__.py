"""Entry point for running the service directly.

Usage: python -m kill_on_time [run|start|stop|status|next|kill-now]
"""

from kill_on_time.cli import main_entry

if __name__ == "__main__":
    main_entry()
