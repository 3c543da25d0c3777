"""
Tests for the promo_cli command-line entry point.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

import promo_cli
from promo_engine.models import DiscountKind

SAMPLE_FILE = Path(__file__).resolve().parent.parent / "data" / "sample_templates.json"


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["promo-engine", *argv])
    promo_cli.main()


class TestRecordFromDict:

    def test_template_export_aliases(self):
        record = promo_cli.record_from_dict(
            {"id": 7, "name": "Referral Bonus", "discount_type": "flat", "discount_value": 300,
             "times_used": 21, "category": "acquisition"}
        )

        assert record.id == "7"
        assert record.code == "Referral Bonus"
        assert record.discount_kind == DiscountKind.FLAT
        assert record.times_redeemed == 21

    def test_promo_code_export_aliases(self):
        record = promo_cli.record_from_dict(
            {"id": "c1", "code": "SAVE10", "discount_kind": "percentage", "discount_value": 10,
             "used_count": 4, "expires_at": "2026-02-01T00:00:00Z", "usage_limit": None}
        )

        assert record.code == "SAVE10"
        assert record.times_redeemed == 4
        assert record.usage_limit is None
        assert record.expires_at.tzinfo is not None

    @pytest.mark.parametrize(
        "raw,expected",
        [("false", False), ("False", False), ("0", False), ("no", False),
         ("true", True), ("yes", True), (False, False), (0, False), (None, True)],
    )
    def test_is_active_parsing(self, raw, expected):
        record = promo_cli.record_from_dict(
            {"id": "1", "discount_type": "flat", "discount_value": 5, "is_active": raw}
        )

        assert record.is_active is expected

    def test_unreadable_is_active_is_rejected(self):
        with pytest.raises(ValueError):
            promo_cli.record_from_dict({"id": "1", "discount_value": 5, "is_active": "maybe"})

    def test_missing_discount_kind_is_kept_as_malformed(self):
        record = promo_cli.record_from_dict({"id": "x", "discount_value": 10})

        assert record.discount_kind is None

    def test_load_records_accepts_wrapped_list(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps({"records": [{"id": "1", "discount_type": "flat", "discount_value": 5}]}))

        assert [r.id for r in promo_cli.load_records(path)] == ["1"]


class TestCommands:

    def test_recommend(self, monkeypatch, capsys):
        run_cli(monkeypatch, "recommend", "--file", str(SAMPLE_FILE), "--goal", "roi", "--date", "2026-01-12")

        out = capsys.readouterr().out
        assert "=== Template Recommendations (ROI Score) ===" in out
        assert "#1 New User Welcome - ROI Score: 91%" in out
        assert "Currently active: New Student Orientation" in out

    def test_recommend_with_no_history(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "fresh.json"
        path.write_text(json.dumps([{"id": "1", "discount_type": "flat", "discount_value": 5}]))

        run_cli(monkeypatch, "recommend", "--file", str(path), "--goal", "revenue", "--date", "2026-01-12")

        assert "Not enough data yet" in capsys.readouterr().out

    def test_invalid_goal_exits(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run_cli(monkeypatch, "recommend", "--file", str(SAMPLE_FILE), "--goal", "clicks")

        assert excinfo.value.code == 1
        assert "Invalid goal 'clicks'" in capsys.readouterr().out

    def test_missing_file_exits(self, monkeypatch, capsys, tmp_path):
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "metrics", "--file", str(tmp_path / "missing.json"))

        assert "not found" in capsys.readouterr().out

    def test_metrics(self, monkeypatch, capsys):
        run_cli(monkeypatch, "metrics", "--file", str(SAMPLE_FILE), "--date", "2026-01-12")

        out = capsys.readouterr().out
        assert "Records scored: 6 (6 active)" in out
        assert "Total redemptions: 98" in out

    def test_metrics_counts_string_inactive_flag(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "paused.json"
        path.write_text(json.dumps([
            {"id": "1", "discount_type": "flat", "discount_value": 5, "times_used": 2, "is_active": "false"},
            {"id": "2", "discount_type": "flat", "discount_value": 5, "times_used": 2, "is_active": "true"},
        ]))

        run_cli(monkeypatch, "metrics", "--file", str(path), "--date", "2026-01-12")

        assert "Records scored: 2 (1 active)" in capsys.readouterr().out

    def test_default_date_is_utc_today(self):
        assert promo_cli._resolve_date(None) == datetime.now(timezone.utc).date()

    def test_context(self, monkeypatch, capsys):
        run_cli(monkeypatch, "context", "--date", "2026-03-08")

        out = capsys.readouterr().out
        assert "Inter-Faculty Sports Day" in out
        assert "Spring Campus Festival in 7 day(s)" in out
        assert "No seasonal pattern matches this month" in out

    def test_bad_date_exits(self, monkeypatch):
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "context", "--date", "12/01/2026")
