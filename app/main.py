"""Flask web UI for browsing the exported clinical trial reports."""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import pandas as pd
from flask import Flask, abort, jsonify, render_template

# Ensure the trial_insights package is importable when running `flask run`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from trial_insights import config  # noqa: E402
from trial_insights.reports import REPORTS  # noqa: E402


def _load_table(path: Path) -> pd.DataFrame:
    if path.exists():
        return pd.read_csv(path)
    return pd.DataFrame()


def create_app(output_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)
    output_dir = Path(output_dir or config.OUTPUT_DIR)

    def _summary() -> dict:
        path = output_dir / config.RUN_SUMMARY_JSON
        if not path.exists():
            return {}
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _available() -> list:
        return [name for name in REPORTS if (output_dir / f"{name}.csv").exists()]

    def _report(name: str) -> pd.DataFrame:
        if name not in REPORTS:
            abort(404)
        return _load_table(output_dir / f"{name}.csv")

    @app.route("/")
    def home():
        return render_template("reports.html", reports=_available(), summary=_summary(), table=None)

    @app.route("/reports/<name>")
    def report(name: str):
        table = _report(name)
        return render_template(
            "reports.html",
            reports=_available(),
            summary=_summary(),
            title=name,
            columns=list(table.columns),
            table=table.to_dict(orient="records"),
        )

    @app.route("/api/reports")
    def api_reports():
        return jsonify(_available())

    @app.route("/api/reports/<name>")
    def api_report(name: str):
        # pandas writes NaN as null and numpy scalars as plain numbers
        return jsonify(json.loads(_report(name).to_json(orient="records")))

    @app.route("/api/summary")
    def api_summary():
        return jsonify(_summary())

    return app


app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
