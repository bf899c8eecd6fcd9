"""control_state.py の単体テスト"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import threading

import pytest
from control_state import ControlState, Mode


class TestManual:

    def test_initial_state(self, state):
        assert state.mode is Mode.MANUAL
        assert state.intensity == 0.0
        assert state.auto_task_active is False

    def test_set_manual(self, state):
        state.set_manual(0.5)
        assert state.intensity == 0.5
        assert state.mode is Mode.MANUAL

    def test_set_manual_leaves_auto(self, state):
        state.request_auto()
        state.set_manual(0.2)
        assert state.mode is Mode.MANUAL

    @pytest.mark.parametrize("value", [-0.1, 1.01])
    def test_set_manual_rejects_out_of_range(self, state, value):
        with pytest.raises(ValueError):
            state.set_manual(value)
        assert state.intensity == 0.0


class TestAutoTaskSlot:

    def test_first_request_claims_slot(self, state):
        assert state.request_auto() is True
        assert state.mode is Mode.AUTO
        assert state.auto_task_active is True

    def test_second_request_does_not_claim(self, state):
        """実行中に再度 auto → 2 つ目は起動しない"""
        assert state.request_auto() is True
        assert state.request_auto() is False
        assert state.mode is Mode.AUTO

    def test_continue_while_auto(self, state):
        state.request_auto()
        assert state.continue_auto_task() is True
        assert state.auto_task_active is True

    def test_continue_after_manual_releases_slot(self, state):
        state.request_auto()
        state.set_manual(0.3)
        assert state.continue_auto_task() is False
        assert state.auto_task_active is False
        # スロットが空いたので次の auto で新しく起動できる
        assert state.request_auto() is True

    def test_auto_before_worker_exit_keeps_worker(self, state):
        """MANUAL → AUTO がワーカーの判定前に来たら、既存ワーカーが続行する"""
        state.request_auto()
        state.stop_auto()
        assert state.request_auto() is False
        assert state.continue_auto_task() is True

    def test_release(self, state):
        state.request_auto()
        state.release_auto_task()
        assert state.auto_task_active is False


class TestApplyAutoIntensity:

    def test_applies_in_auto(self, state):
        state.set_manual(0.25)
        state.request_auto()
        result = state.apply_auto_intensity(lambda current: current * 2)
        assert result == 0.5
        assert state.intensity == 0.5

    def test_dropped_in_manual(self, state):
        """MANUAL に戻った後の自動サンプルは反映しない"""
        state.set_manual(0.25)
        assert state.apply_auto_intensity(lambda current: 1.0) is None
        assert state.intensity == 0.25

    def test_concurrent_claims_yield_one_worker(self, state):
        """複数スレッドから同時に auto を要求してもスロットは 1 つ"""
        results = []
        barrier = threading.Barrier(8)

        def claim():
            barrier.wait()
            results.append(state.request_auto())

        threads = [threading.Thread(target=claim) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
