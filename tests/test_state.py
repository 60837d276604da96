"""Unit tests for application state and event dispatch."""

import unittest

import numpy as np

from estimatemc import config
from estimatemc.estimates import EstimateField
from estimatemc.sampler import SampleRun, SamplerMode
from estimatemc.state import (
    AddEstimate,
    AppState,
    ChangeSettings,
    RemoveEstimate,
    RequestSamples,
    SamplesReady,
    UpdateEstimate,
    dispatch,
    interval_for,
)


class TestInitialState(unittest.TestCase):

    def test_defaults(self):
        state = AppState()
        self.assertEqual(state.store.ids(), [0])
        self.assertEqual(state.samples.size, 0)
        self.assertEqual(state.sample_count, config.SAMPLE_COUNT)
        self.assertEqual(state.interval, config.DEFAULT_INTERVAL)
        self.assertIs(state.mode, SamplerMode.LEGACY)

    def test_matches_config_defaults(self):
        state = AppState()
        for key, value in config.get_sampling_defaults().items():
            self.assertEqual(getattr(state, key), value)

    def test_states_do_not_share_stores(self):
        a, b = AppState(), AppState()
        dispatch(a, AddEstimate())
        self.assertEqual(b.store.ids(), [0])


class TestEstimateEvents(unittest.TestCase):

    def test_add_remove_update(self):
        state = AppState()
        state = dispatch(state, AddEstimate())
        state = dispatch(state, AddEstimate())
        state = dispatch(state, RemoveEstimate("1"))
        state = dispatch(state, UpdateEstimate("2", EstimateField.DESCRIPTION, "latency"))
        self.assertEqual(state.store.ids(), [0, 2])
        self.assertEqual(state.store.get(2).description, "latency")

    def test_earlier_state_is_not_changed(self):
        before = dispatch(AppState(), AddEstimate())
        after = dispatch(before, AddEstimate())
        after = dispatch(after, UpdateEstimate(1, EstimateField.DESCRIPTION, "latency"))
        after = dispatch(after, RemoveEstimate(0))
        self.assertEqual(before.store.ids(), [0, 1])
        self.assertEqual(before.store.get(1).description, "")
        self.assertEqual(after.store.ids(), [1, 2])
        self.assertIsNot(before.store, after.store)

    def test_settings_change_keeps_store_contents(self):
        state = dispatch(AppState(), AddEstimate())
        state = dispatch(state, ChangeSettings(bucket_count=10))
        self.assertEqual(state.store.ids(), [0, 1])

    def test_unknown_event_raises(self):
        with self.assertRaises(ValueError):
            dispatch(AppState(), object())


class TestSamplingEvents(unittest.TestCase):

    def test_request_replaces_samples(self):
        state = dispatch(AppState(), ChangeSettings(sample_count=2000, seed=1))
        state = dispatch(state, RequestSamples())
        first = state.samples
        self.assertEqual(first.size, 2000)
        state = dispatch(state, ChangeSettings(sample_count=1500))
        state = dispatch(state, RequestSamples())
        self.assertEqual(state.samples.size, 1500)

    def test_samples_within_interval(self):
        state = dispatch(AppState(), ChangeSettings(sample_count=2000, interval=(0, 4), seed=3))
        state = dispatch(state, RequestSamples())
        self.assertTrue(np.all((state.samples >= 0.0) & (state.samples <= 4.0)))
        self.assertFalse(np.isnan(state.acceptance_rate))

    def test_samples_ready_applies_run(self):
        run = SampleRun(samples=np.array([1.0, 2.0]), accepted=1, proposed=2)
        state = dispatch(AppState(), SamplesReady(run))
        np.testing.assert_array_equal(state.samples, [1.0, 2.0])
        self.assertEqual(state.acceptance_rate, 0.5)

    def test_rejection_mode_setting(self):
        state = dispatch(AppState(), ChangeSettings(sample_count=999, mode="rejection", seed=4))
        state = dispatch(state, RequestSamples())
        self.assertIs(state.mode, SamplerMode.REJECTION)
        self.assertEqual(state.samples.size, 999)


class TestSettings(unittest.TestCase):

    def test_clamps(self):
        state = dispatch(AppState(), ChangeSettings(sample_count=-3, bucket_count=0, chart_height=0))
        self.assertEqual(state.sample_count, 0)
        self.assertEqual(state.bucket_count, 1)
        self.assertEqual(state.chart_height, 1)
        state = dispatch(state, ChangeSettings(sample_count=config.MAX_SAMPLE_COUNT + 1))
        self.assertEqual(state.sample_count, config.MAX_SAMPLE_COUNT)

    def test_seed_set_and_clear(self):
        state = dispatch(AppState(), ChangeSettings(seed=5))
        self.assertEqual(state.seed, 5)
        state = dispatch(state, ChangeSettings(clear_seed=True))
        self.assertIsNone(state.seed)

    def test_display_range_sorted(self):
        state = dispatch(AppState(), ChangeSettings(interval=(9, 2)))
        self.assertEqual(state.interval, (9.0, 2.0))
        self.assertEqual(state.display_range, (2.0, 9.0))


class TestIntervalFor(unittest.TestCase):

    def test_estimate_interval(self):
        state = dispatch(AppState(), AddEstimate())
        state = dispatch(state, UpdateEstimate(1, EstimateField.MAX, "25"))
        self.assertEqual(interval_for(state, 1), (0.0, 25.0))
        self.assertEqual(interval_for(state, "1"), (0.0, 25.0))

    def test_default_interval(self):
        state = AppState()
        self.assertEqual(interval_for(state), config.DEFAULT_INTERVAL)
        self.assertEqual(interval_for(state, 99), config.DEFAULT_INTERVAL)


if __name__ == "__main__":
    unittest.main()
