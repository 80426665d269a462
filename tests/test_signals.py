"""Tests for services/signals.py: viewer flags and the reload pulse."""

import time
import unittest

from tvboard.services.signals import ViewerSignals


class TestShowTvNumbers(unittest.TestCase):

    def test_toggle(self):
        signals = ViewerSignals()
        self.assertFalse(signals.show_tv_numbers)
        self.assertTrue(signals.set_show_tv_numbers(True))
        self.assertTrue(signals.show_tv_numbers)
        self.assertFalse(signals.set_show_tv_numbers(False))


class TestTriggerReload(unittest.TestCase):

    def setUp(self):
        self.signals = ViewerSignals(pulse_sec=0.2)

    def tearDown(self):
        self.signals.shutdown()

    def _wait_for(self, predicate, timeout=3.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.02)
        return predicate()

    def test_pulse_reverts_automatically(self):
        self.assertTrue(self.signals.set_trigger_reload(True))
        self.assertTrue(self.signals.trigger_reload)
        self.assertTrue(self._wait_for(lambda: not self.signals.trigger_reload))

    def test_setting_again_replaces_timer(self):
        self.signals.set_trigger_reload(True)
        first = self.signals._reload_timer
        self.signals.set_trigger_reload(True)
        second = self.signals._reload_timer
        self.assertIsNot(first, second)
        self.assertTrue(first.finished.is_set())
        self.assertTrue(self.signals.trigger_reload)

    def test_stale_timer_does_not_clear_newer_pulse(self):
        self.signals.set_trigger_reload(True)
        stale_generation = self.signals._generation
        self.signals.set_trigger_reload(True)
        self.signals._expire(stale_generation)
        self.assertTrue(self.signals.trigger_reload)

    def test_setting_false_cancels(self):
        self.signals.set_trigger_reload(True)
        self.assertFalse(self.signals.set_trigger_reload(False))
        self.assertIsNone(self.signals._reload_timer)
        self.assertFalse(self.signals.trigger_reload)

    def test_shutdown_cancels_pending_timer(self):
        slow = ViewerSignals(pulse_sec=60)
        slow.set_trigger_reload(True)
        timer = slow._reload_timer
        slow.shutdown()
        self.assertTrue(timer.finished.is_set())
        self.assertFalse(slow.trigger_reload)
