"""
Tests for JSON serialization and the program store.
"""

import json
import tempfile
from pathlib import Path

import pytest

from lift_planner.core.engine import compute_program
from lift_planner.core.models import SlotResult
from lift_planner.core.programs import get_program
from lift_planner.io.program_store import ProgramStore
from lift_planner.io.serializers import (
    ValidationError,
    dict_to_results,
    dict_to_slot_result,
    parse_assignment,
    parse_config_value,
    results_to_dict,
    slot_result_to_dict,
    validate_session_index,
    workout_rows_to_json,
)


@pytest.fixture
def store():
    """A fresh GZCLP store in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        s = ProgramStore(Path(tmpdir) / "nested" / "program.json")
        s.init("gzclp", {"squat": 60.0, "bench": 40.0})
        yield s


# =============================================================================
# Serializers
# =============================================================================


class TestParsing:
    """User-entered values."""

    def test_config_value(self):
        assert parse_config_value("62.5", "squat") == 62.5
        assert parse_config_value(60, "squat") == 60.0

    @pytest.mark.parametrize("raw", ["heavy", "-5", "nan", "inf", True])
    def test_config_value_rejected(self, raw):
        with pytest.raises(ValidationError):
            parse_config_value(raw, "squat")

    def test_assignment(self):
        assert parse_assignment("squat_tm = 120") == ("squat_tm", 120.0)

    @pytest.mark.parametrize("text", ["squat", "=60", "squat=abc"])
    def test_assignment_rejected(self, text):
        with pytest.raises(ValidationError):
            parse_assignment(text)

    @pytest.mark.parametrize("key", ["-1", "1.5", "abc", "01"])
    def test_session_index_rejected(self, key):
        with pytest.raises(ValidationError):
            validate_session_index(key)

    def test_session_index_normalized(self):
        assert validate_session_index(12) == "12"


class TestResultSerialization:
    """Compact result documents."""

    def test_only_recorded_fields_written(self):
        assert slot_result_to_dict(SlotResult("success")) == {"result": "success"}
        assert slot_result_to_dict(SlotResult(amrap_reps=7, rpe=8.0)) == {
            "amrap_reps": 7,
            "rpe": 8.0,
        }

    def test_invalid_result_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_slot_result({"result": "maybe"})

    def test_invalid_rpe_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_slot_result({"rpe": 11})

    def test_results_sorted_and_empty_dropped(self):
        results = {
            "10": {"sq": SlotResult("fail")},
            "2": {"sq": SlotResult("success"), "bp": SlotResult()},
            "3": {"bp": SlotResult()},
        }
        d = results_to_dict(results)
        assert list(d) == ["2", "10"]
        assert d["2"] == {"sq": {"result": "success"}}

    def test_results_bad_index(self):
        with pytest.raises(ValidationError):
            dict_to_results({"x": {"sq": {"result": "success"}}})

    def test_rows_to_json(self):
        program = get_program("gzclp")
        rows = compute_program(program, {"squat": 60}, {})[:2]
        data = json.loads(workout_rows_to_json(rows))
        assert [d["index"] for d in data] == [0, 1]
        first = data[0]["slots"][0]
        assert first["slot_id"] == "squat-t1"
        assert first["weight"] == 60
        assert "prescriptions" not in first
        assert "is_gpp" not in first


# =============================================================================
# ProgramStore
# =============================================================================


class TestProgramStore:
    """Program file lifecycle."""

    def test_init_creates_file(self, store):
        assert store.exists()
        data = json.loads(store.store_path.read_text())
        assert data["program_id"] == "gzclp"
        assert data["results"] == {}

    def test_missing_file(self, tmp_path):
        s = ProgramStore(tmp_path / "none.json")
        assert not s.exists()
        with pytest.raises(FileNotFoundError, match="init"):
            s.load_config()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "program.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError):
            ProgramStore(path).load_results()

    def test_config(self, store):
        store.update_config("squat", 62.5)
        assert store.load_config() == {"squat": 62.5, "bench": 40.0}
        assert store.load_program_id() == "gzclp"

    def test_update_config_rejects_negative(self, store):
        with pytest.raises(ValidationError):
            store.update_config("squat", -1)

    def test_record_and_load(self, store):
        store.record_result(0, "squat-t1", result="success", amrap_reps=6)
        assert store.load_results() == {"0": {"squat-t1": SlotResult("success", amrap_reps=6)}}

    def test_record_merges_fields(self, store):
        store.record_result(0, "squat-t1", result="fail")
        stored = store.record_result(0, "squat-t1", rpe=9.5)
        assert stored == SlotResult("fail", rpe=9.5)

    def test_record_none_clears_field(self, store):
        store.record_result(0, "squat-t1", result="fail", rpe=9.0)
        store.record_result(0, "squat-t1", rpe=None)
        assert store.load_results()["0"]["squat-t1"] == SlotResult("fail")

    def test_record_validates(self, store):
        with pytest.raises(ValidationError):
            store.record_result(0, "squat-t1", result="meh")
        with pytest.raises(ValidationError):
            store.record_result(-1, "squat-t1", result="success")
        with pytest.raises(ValidationError):
            store.record_result(0, "squat-t1", rpe=0.5)
        assert store.load_results() == {}

    def test_clear(self, store):
        store.record_result(3, "bench-t1", result="success")
        assert store.clear_result(3, "bench-t1") is True
        assert store.clear_result(3, "bench-t1") is False
        assert store.load_results() == {}

    def test_undo_record(self, store):
        store.record_result(0, "squat-t1", result="success")
        store.record_result(0, "squat-t1", result="fail")
        assert store.undo() == ("0", "squat-t1")
        assert store.load_results()["0"]["squat-t1"].result == "success"
        assert store.undo() == ("0", "squat-t1")
        assert store.load_results() == {}
        assert store.undo() is None

    def test_undo_clear(self, store):
        store.record_result(4, "squat-t1", result="fail", amrap_reps=2)
        store.clear_result(4, "squat-t1")
        store.undo()
        assert store.load_results()["4"]["squat-t1"] == SlotResult("fail", amrap_reps=2)

    def test_undo_depth_bounded(self, store):
        for i in range(60):
            store.record_result(i, "squat-t1", result="success")
        assert store.undo_depth() == 50

    def test_results_replay(self, store):
        store.record_result(0, "squat-t1", result="fail")
        rows = compute_program(get_program("gzclp"), store.load_config(), store.load_results())
        assert rows[4].slots[0].stage == 1


class TestApplyTestWeight:
    """Tested maxes feed the next block."""

    def test_propagates(self, tmp_path):
        s = ProgramStore(tmp_path / "program.json")
        s.init("jaw", {"squat_b1_tm": 100})
        slot = get_program("jaw").find_slot("b1-squat-test")

        assert s.apply_test_weight(slot, 112.5) == "squat_b2_tm"
        assert s.load_config()["squat_b2_tm"] == 112.5

    def test_range_checked(self, tmp_path):
        s = ProgramStore(tmp_path / "program.json")
        s.init("jaw", {})
        slot = get_program("jaw").find_slot("b1-squat-test")
        with pytest.raises(ValidationError):
            s.apply_test_weight(slot, 10)
        with pytest.raises(ValidationError):
            s.apply_test_weight(slot, 600)

    def test_final_block_has_no_target(self, tmp_path):
        s = ProgramStore(tmp_path / "program.json")
        s.init("jaw", {})
        slot = get_program("jaw").find_slot("b3-squat-test")
        with pytest.raises(ValidationError):
            s.apply_test_weight(slot, 150)

    def test_non_test_slot_rejected(self, store):
        slot = get_program("gzclp").find_slot("squat-t1")
        with pytest.raises(ValidationError):
            store.apply_test_weight(slot, 100)
