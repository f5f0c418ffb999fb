"""
Output Formatter for exporting frame results.

Supports:
- JSON: Full structured output with metadata
- CSV: One row per ray path vertex
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

logger = logging.getLogger(__name__)


class OutputFormatter:
    """Formatter for exporting frame results.

    Example:
        >>> formatter = OutputFormatter()
        >>> formatter.save(result, "frame.json", format="json")
        >>> formatter.save(result, "frame.csv", format="csv")
    """

    def save(
        self,
        result,  # FrameResult
        output_path: str,
        format: str = "json",
        config: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> str:
        """Save a frame result to file.

        Args:
            result: FrameResult object
            output_path: Output file path
            format: Output format (json, csv)
            config: Scene configuration dictionary stored with JSON output
            **kwargs: Additional format-specific options

        Returns:
            Path to saved file

        Raises:
            ValueError: If format is not supported
        """
        format = format.lower()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if format == "json":
            return self._save_json(result, output_path, config=config, **kwargs)
        elif format == "csv":
            return self._save_csv(result, output_path, **kwargs)
        else:
            raise ValueError(f"Unsupported format: {format}")

    @staticmethod
    def to_dict(result, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Structured representation of a frame result."""
        apparent = result.apparent_source
        data = {
            "metadata": {
                "format_version": "1.0",
                "created": datetime.now().isoformat(),
                "software": "FlatRefract",
                **result.metadata,
            },
            "source": {"x": result.source.x, "y": result.source.y},
            "observer": {"x": result.observer.x, "y": result.observer.y},
            "apparent_source": None if apparent is None else {
                "x": apparent.position.x,
                "y": apparent.position.y,
                "spread": apparent.spread,
            },
            "hits": [
                {"x": h.x, "y": h.y, "normal_x": h.normal_x, "normal_y": h.normal_y}
                for h in result.hits
            ],
            "rays": [
                {
                    "target_x": path.target_x,
                    "in_shadow": path.in_shadow,
                    "segments": [
                        {
                            "in_shadow": seg.in_shadow,
                            "points": [[p.x, p.y] for p in seg.points],
                        }
                        for seg in path.segments
                    ],
                    "reflections": [
                        {
                            "x": r.point.x,
                            "y": r.point.y,
                            "strength": r.strength,
                            "reflectance": r.reflectance,
                        }
                        for r in path.reflections
                    ],
                }
                for path in result.paths
            ],
        }
        if config is not None:
            data["configuration"] = config
        return data

    def _save_json(
        self,
        result,
        output_path: Path,
        config: Optional[Dict[str, Any]] = None,
        indent: int = 2,
        **kwargs,
    ) -> str:
        """Save result to JSON format.

        Args:
            result: FrameResult
            output_path: Output file path
            config: Optional configuration dictionary
            indent: JSON indentation

        Returns:
            Path to saved file
        """
        with open(output_path, 'w') as f:
            json.dump(self.to_dict(result, config), f, indent=indent)

        logger.info(f"Saved JSON output to {output_path}")
        return str(output_path)

    def _save_csv(
        self,
        result,
        output_path: Path,
        delimiter: str = ",",
        **kwargs,
    ) -> str:
        """Save every path vertex to CSV.

        Columns: ray, segment, in_shadow, x, y

        Args:
            result: FrameResult
            output_path: Output file path
            delimiter: Column delimiter

        Returns:
            Path to saved file
        """
        rows = []
        for ray_id, path in enumerate(result.paths):
            for seg_id, seg in enumerate(path.segments):
                for p in seg.points:
                    rows.append((ray_id, seg_id, int(seg.in_shadow), p.x, p.y))

        data = np.array(rows, dtype=float).reshape(-1, 5)
        np.savetxt(
            output_path,
            data,
            delimiter=delimiter,
            header=delimiter.join(["ray", "segment", "in_shadow", "x", "y"]),
            comments='',
            fmt=["%d", "%d", "%d", "%.6f", "%.6f"],
        )

        logger.info(f"Saved CSV output to {output_path}")
        return str(output_path)
