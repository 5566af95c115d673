import json
import threading
from pathlib import Path

from .types import ListingInfo


class JsonlWriter:
    def __init__(self, output_path: str, append: bool = True) -> None:
        self.output_path = output_path
        self._lock = threading.Lock()
        out_path = Path(self.output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        mode = "a" if append else "w"
        self._fh = out_path.open(mode, encoding="utf-8")

    def write(self, info: ListingInfo) -> None:
        line = json.dumps(info.to_dict(), ensure_ascii=False)
        with self._lock:
            self._fh.write(line + "\n")
            self._fh.flush()

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.close()

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
