"""Allow `python -m glazewm_ipc`."""

from .cli import main

main()
