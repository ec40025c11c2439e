"""Console sink for resolved parameter dumps."""
import json
from typing import Any, Dict, Optional

from rich.console import Console


class RichParameterSink:
    """Prints each resolved parameter set as JSON on a rich console.

    Values arrive already redacted; the sink never sees secrets.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def __call__(self, kind: str, payload: Dict[str, Any]) -> None:
        self.console.print(f"[blue]Debug: Resolved parameters for {kind}[/]")
        self.console.print_json(json.dumps(payload))
