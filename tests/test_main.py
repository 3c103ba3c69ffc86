import unittest
from unittest.mock import patch

from mcp_usecases.config import Config
from mcp_usecases.errors import ConfigurationError
from mcp_usecases.main import USE_CASES, build_server, main, parse_command


class TestBuildServer(unittest.TestCase):
    def tool_names(self, server):
        return [tool["name"] for tool in server.list_tools()]

    def test_travel_planner(self):
        server = build_server("travel-planner")
        self.assertEqual(server.info.name, "Travel Planner MCP")
        self.assertEqual(server.info.version, "1.0.0")
        self.assertEqual(sorted(self.tool_names(server)), sorted([
            "search_flights",
            "book_flight",
            "get_flight_status",
            "search_hotels",
            "get_hotel_details",
            "book_hotel",
            "check_calendar_conflicts",
            "create_travel_plan",
            "get_travel_plan",
            "book_trip",
        ]))

    def test_restaurant_reservation(self):
        with patch.object(Config, "YELP_API_KEY", "test-key"):
            server = build_server("restaurant-reservation")
        self.assertEqual(server.info.name, "Restaurant Reservation MCP")
        self.assertEqual(sorted(self.tool_names(server)), sorted([
            "search_restaurants",
            "get_restaurant_details",
            "check_availability",
            "make_reservation",
            "view_reservations",
            "cancel_reservation",
        ]))

    def test_restaurant_requires_yelp_key(self):
        with patch.object(Config, "YELP_API_KEY", None):
            with self.assertRaises(ConfigurationError):
                build_server("restaurant-reservation")

    def test_meeting_summary(self):
        with patch("mcp_usecases.tools.meetings.provider_from_config", return_value=None):
            server = build_server("meeting-summary")
        self.assertEqual(server.info.name, "Meeting Summarizer MCP")
        self.assertEqual(sorted(self.tool_names(server)), sorted([
            "summarize_document",
            "validate_document_content",
            "summarize_file",
            "create_jira_task_from_doc",
            "list_jira_projects",
            "get_jira_issue_types",
        ]))

    def test_unknown_use_case(self):
        with self.assertRaises(ValueError):
            build_server("weather")
        self.assertEqual(len(USE_CASES), 3)


class TestCli(unittest.TestCase):
    def test_parse_command(self):
        self.assertEqual(parse_command('search_flights {"origin": "JFK"}'), ("search_flights", {"origin": "JFK"}))
        self.assertEqual(parse_command("  list_jira_projects  "), ("list_jira_projects", {}))
        with self.assertRaises(ValueError):
            parse_command("search_flights [1, 2]")
        with self.assertRaises(ValueError):
            parse_command("search_flights {not json}")

    def test_main_stops_when_required_keys_missing(self):
        with patch.object(Config, "YELP_API_KEY", None), patch("mcp_usecases.main.setup_logging"):
            self.assertEqual(main(["restaurant-reservation"]), 1)


if __name__ == "__main__":
    unittest.main()
