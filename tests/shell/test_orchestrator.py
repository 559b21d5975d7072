"""Tests for the Orchestrator module.

Tests the coordination between functional core and imperative shell.
Uses mocks for shell components to test orchestration logic.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from src.core.config import Config
from src.core.conversation import (
    FAILURE_MESSAGE,
    MISSING_CREDENTIAL_MESSAGE,
    NO_DATA_MESSAGE,
    ModelCallError,
    ModelCallErrorKind,
    ModelResult,
    Phase,
    Role,
)
from src.core.earthquake import Earthquake
from src.core.feed import FetchError, FetchErrorKind, FetchResult
from src.core.filters import FilterCriteria, TimeWindow
from src.orchestrator import (
    FEED_ERROR_NOTICE,
    Orchestrator,
    dashboard_to_dict,
)


NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_earthquake(id, magnitude, age, place="Somewhere"):
    return Earthquake(
        id=id,
        magnitude=magnitude,
        place=place,
        time=NOW - age,
        latitude=0.0,
        longitude=0.0,
        depth_km=10.0,
    )


@pytest.fixture
def earthquakes():
    return [
        make_earthquake("tonga", 6.1, timedelta(minutes=30), place="Tonga"),
        make_earthquake("nevada", 2.0, timedelta(hours=3), place="Nevada"),
        make_earthquake("chile", 4.9, timedelta(hours=8), place="Chile"),
    ]


@pytest.fixture
def mock_usgs_client(earthquakes):
    """Create a mock USGS client."""
    client = Mock()
    client.fetch_events.return_value = FetchResult(success=True, earthquakes=earthquakes)
    return client


@pytest.fixture
def mock_gemini_client():
    """Create a mock Gemini client."""
    client = Mock()
    client.generate.return_value = ModelResult(
        success=True,
        text="**Strongest** was *M6.1* in Tonga\n\n\n\nStay safe",
    )
    return client


@pytest.fixture
def orchestrator(mock_usgs_client, mock_gemini_client):
    return Orchestrator(
        Config(gemini_api_key="test-key"),
        usgs_client=mock_usgs_client,
        gemini_client=mock_gemini_client,
    )


class TestRefresh:
    """Tests for Orchestrator.refresh()."""

    def test_successful_refresh_loads_events(self, orchestrator, earthquakes):
        result = orchestrator.refresh(NOW)

        assert result.success is True
        assert result.applied is True
        assert result.earthquakes_fetched == 3
        assert list(orchestrator.feed.snapshot()) == earthquakes

    def test_success_queues_notification(self, orchestrator):
        orchestrator.refresh(NOW)

        notifications = orchestrator.drain_notifications()

        assert len(notifications) == 1
        assert notifications[0].level == "success"
        assert notifications[0].message == "Loaded 3 earthquakes"
        assert orchestrator.drain_notifications() == []

    def test_failure_keeps_previous_events(self, orchestrator, mock_usgs_client, earthquakes):
        orchestrator.refresh(NOW)
        mock_usgs_client.fetch_events.return_value = FetchResult(
            success=False,
            error=FetchError(kind=FetchErrorKind.NETWORK, message="Connection refused"),
        )

        result = orchestrator.refresh(NOW + timedelta(minutes=5))

        assert result.success is False
        assert list(orchestrator.feed.snapshot()) == earthquakes
        assert orchestrator.feed.last_error.kind == FetchErrorKind.NETWORK
        assert orchestrator.drain_notifications()[-1].message == FEED_ERROR_NOTICE

    def test_refresh_if_stale(self, orchestrator, mock_usgs_client):
        orchestrator.refresh_if_stale(NOW)
        assert orchestrator.refresh_if_stale(NOW + timedelta(seconds=60)) is None
        orchestrator.refresh_if_stale(NOW + timedelta(seconds=300))

        assert mock_usgs_client.fetch_events.call_count == 2


class TestFiltersAndStats:
    """Tests for filtering and statistics over the feed."""

    def test_default_filters_return_everything(self, orchestrator):
        orchestrator.refresh(NOW)
        assert len(orchestrator.filtered_earthquakes(NOW)) == 3

    def test_set_filters(self, orchestrator):
        orchestrator.refresh(NOW)
        orchestrator.set_filters(FilterCriteria(min_magnitude=5.0, time_window=TimeWindow.LAST_HOUR))

        result = orchestrator.filtered_earthquakes(NOW)
        stats = orchestrator.stats(NOW)

        assert [e.id for e in result] == ["tonga"]
        assert stats.total == 1
        assert stats.max_magnitude == 6.1
        assert stats.significant_count == 1
        assert stats.recent_count == 1

    def test_clear_filters(self, orchestrator):
        orchestrator.set_filters(FilterCriteria(min_magnitude=5.0))
        orchestrator.clear_filters()
        assert orchestrator.criteria == FilterCriteria()

    def test_filtered_set_is_subset(self, orchestrator):
        orchestrator.refresh(NOW)
        orchestrator.set_filters(FilterCriteria(time_window=TimeWindow.LAST_6_HOURS))

        ingested = orchestrator.feed.snapshot()
        assert all(e in ingested for e in orchestrator.filtered_earthquakes(NOW))


class TestAsk:
    """Tests for Orchestrator.ask()."""

    def test_successful_insight(self, orchestrator, mock_gemini_client):
        orchestrator.refresh(NOW)

        state = orchestrator.ask("Where was the strongest?", NOW)

        prompt, api_key = mock_gemini_client.generate.call_args[0]
        assert "Where was the strongest?" in prompt
        assert "1. M6.1 at Tonga" in prompt
        assert api_key == "test-key"
        assert [m.role for m in state.messages] == [Role.ASSISTANT, Role.USER, Role.ASSISTANT]
        assert state.messages[-1].content == "Strongest was M6.1 in Tonga\n\nStay safe"
        assert state.phase == Phase.IDLE

    def test_prompt_uses_filtered_events(self, orchestrator, mock_gemini_client):
        orchestrator.refresh(NOW)
        orchestrator.set_filters(FilterCriteria(min_magnitude=4.5))

        orchestrator.ask("q", NOW)

        prompt = mock_gemini_client.generate.call_args[0][0]
        assert "Total earthquakes: 2" in prompt
        assert "Nevada" not in prompt

    def test_no_data_skips_model_call(self, orchestrator, mock_gemini_client):
        state = orchestrator.ask("Where was the strongest?", NOW)

        mock_gemini_client.generate.assert_not_called()
        assert len(state.messages) == 2
        assert state.messages[-1].content == NO_DATA_MESSAGE

    def test_missing_credential_skips_model_call(self, mock_usgs_client, mock_gemini_client):
        orchestrator = Orchestrator(
            Config(gemini_api_key=None),
            usgs_client=mock_usgs_client,
            gemini_client=mock_gemini_client,
        )
        orchestrator.refresh(NOW)

        state = orchestrator.ask("test", NOW)

        mock_gemini_client.generate.assert_not_called()
        assert [m.content for m in state.messages[1:]] == [MISSING_CREDENTIAL_MESSAGE]

    def test_model_failure_becomes_message(self, orchestrator, mock_gemini_client):
        orchestrator.refresh(NOW)
        mock_gemini_client.generate.return_value = ModelResult(
            success=False,
            error=ModelCallError(kind=ModelCallErrorKind.NETWORK, message="timed out"),
        )

        state = orchestrator.ask("q", NOW)

        assert state.messages[-1].content == FAILURE_MESSAGE
        assert state.phase == Phase.IDLE

    def test_model_call_exception_returns_to_idle(self, orchestrator, mock_gemini_client):
        orchestrator.refresh(NOW)
        mock_gemini_client.generate.side_effect = KeyError(0)

        state = orchestrator.ask("q", NOW)

        assert state.phase == Phase.IDLE
        assert state.pending_request_id is None
        assert state.messages[-1].content == FAILURE_MESSAGE

    def test_next_question_runs_after_model_call_exception(self, orchestrator, mock_gemini_client):
        orchestrator.refresh(NOW)
        mock_gemini_client.generate.side_effect = [
            KeyError(0),
            ModelResult(success=True, text="Second answer"),
        ]

        orchestrator.ask("first", NOW)
        state = orchestrator.ask("second question", NOW)

        assert mock_gemini_client.generate.call_count == 2
        assert [m.content for m in state.messages[-2:]] == ["second question", "Second answer"]

    def test_blank_question_is_ignored(self, orchestrator, mock_gemini_client):
        orchestrator.refresh(NOW)

        state = orchestrator.ask("   ", NOW)

        mock_gemini_client.generate.assert_not_called()
        assert len(state.messages) == 1


class TestDashboard:
    """Tests for Orchestrator.dashboard()."""

    def test_dashboard_view(self, orchestrator):
        orchestrator.refresh(NOW)

        dashboard = orchestrator.dashboard(NOW)

        assert dashboard.stats.total == 3
        assert dashboard.activity_level == "Low"
        assert dashboard.feed_error is None
        assert [n.message for n in dashboard.notifications] == ["Loaded 3 earthquakes"]
        assert len(dashboard.conversation.messages) == 1

    def test_dashboard_to_dict(self, orchestrator, mock_usgs_client):
        orchestrator.refresh(NOW)
        mock_usgs_client.fetch_events.return_value = FetchResult(
            success=False,
            error=FetchError(kind=FetchErrorKind.STATUS, message="HTTP 502", status_code=502),
        )
        orchestrator.refresh(NOW)

        data = dashboard_to_dict(orchestrator.dashboard(NOW))

        assert data["filters"] == {"min_magnitude": 0.0, "time_window": "all"}
        assert len(data["earthquakes"]) == 3
        assert data["earthquakes"][0]["id"] == "tonga"
        assert data["stats"]["total"] == 3
        assert data["feed_error"] == {"kind": "status", "message": "HTTP 502", "status_code": 502}
        assert [n["level"] for n in data["notifications"]] == ["success", "error"]
        assert data["conversation"]["phase"] == "idle"
        assert data["conversation"]["messages"][0]["role"] == "assistant"

    def test_earthquakes_carry_display_labels(self, orchestrator, mock_usgs_client):
        mock_usgs_client.fetch_events.return_value = FetchResult(
            success=True,
            earthquakes=[
                Earthquake(
                    id="tonga",
                    magnitude=6.1,
                    place="Tonga",
                    time=NOW,
                    latitude=-21.0,
                    longitude=-175.0,
                    depth_km=35.0,
                    significance=650,
                ),
                make_earthquake("nevada", 2.0, timedelta(hours=3)),
            ],
        )
        orchestrator.refresh(NOW)

        data = dashboard_to_dict(orchestrator.dashboard(NOW))

        tonga, nevada = data["earthquakes"]
        assert tonga["magnitude_class"] == "Moderate to Major"
        assert tonga["significance_level"] == "High"
        assert nevada["magnitude_class"] == "Minor"
        assert nevada["significance_level"] == "Low"
