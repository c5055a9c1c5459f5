"""
Unit tests for the live-map routing client.

HTTP traffic is replaced by a mocked requests.Session.
"""

import json
import unittest
from unittest import mock

import requests

from network_builders import OAK_AVE, network, seg

from bdp_core.config import BDPConfig
from bdp_core.exceptions import RoutingServiceError
from bdp_core.live_map import LiveMapRouteClient, interior_length, sanitize_response_text
from bdp_core.types import Segment


def steps(*pairs):
    return [{"path": {"segmentId": segment_id, "nodeId": 0}, "length": length} for segment_id, length in pairs]


def payload(primary=None, alternatives=()):
    data = {}
    if primary is not None:
        data["coords"] = [{"x": 0.0, "y": 0.0}]
        data["response"] = {"results": primary}
    if alternatives:
        data["alternatives"] = [{"response": {"results": alt}} for alt in alternatives]
    return data


def fake_response(text, status_code=200):
    response = mock.Mock()
    response.text = text
    response.status_code = status_code
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} error")
        error.response = response
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response


class LiveMapTestCase(unittest.TestCase):
    """Network: A(1-2) - B(2-3) - C(3-4) minor highways on Main St, plus
    D(2-5, major highway) - E(5-3, minor highway) and F(2-3, Oak Ave)."""

    def setUp(self):
        self.a = seg(1, 1, 2, length=100)
        self.b = seg(2, 2, 3, length=200)
        self.c = seg(3, 3, 4, length=100)
        self.d = seg(4, 2, 5, road_type=6, length=150)
        self.e = seg(5, 5, 3, length=150)
        self.f = seg(6, 2, 3, street=OAK_AVE, length=180)
        self.net = network([self.a, self.b, self.c, self.d, self.e, self.f])
        self.session = mock.Mock(spec=requests.Session)
        self.client = LiveMapRouteClient(self.net, BDPConfig(), session=self.session)

    def respond(self, data=None, text=None, status_code=200):
        if text is None:
            text = json.dumps(data)
        self.session.get.return_value = fake_response(text, status_code)


class TestFindRoutes(LiveMapTestCase):

    def test_primary_route_accepted(self):
        self.respond(payload(primary=steps((1, 100), (2, 200), (3, 100))))
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [[1, 2, 3]])

    def test_mismatched_road_type_alternative_excluded(self):
        self.respond(payload(
            primary=steps((1, 100), (2, 200), (3, 100)),
            alternatives=[steps((1, 100), (4, 150), (5, 150), (3, 100))],
        ))
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [[1, 2, 3]])

    def test_name_break_alternative_excluded(self):
        self.respond(payload(alternatives=[
            steps((1, 100), (6, 180), (3, 100)),
            steps((1, 100), (2, 200), (3, 100)),
        ]))
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [[1, 2, 3]])

    def test_primary_ignored_without_coords(self):
        data = payload(alternatives=[steps((1, 100), (2, 200), (3, 100))])
        data["response"] = {"results": steps((1, 100), (2, 200), (3, 100))}
        self.respond(data)
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [[1, 2, 3]])

    def test_all_accepted_routes_returned_in_order(self):
        route = steps((1, 100), (2, 200), (3, 100))
        self.respond(payload(primary=route, alternatives=[route]))
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [[1, 2, 3], [1, 2, 3]])

    def test_length_must_be_strictly_below_budget(self):
        # Only the interior step (200m) counts towards the budget
        self.respond(payload(primary=steps((1, 100), (2, 200), (3, 100))))
        self.assertEqual(self.client.find_routes(self.a, self.c, 201), [[1, 2, 3]])
        self.assertEqual(self.client.find_routes(self.a, self.c, 200), [])

    def test_unknown_segment_drops_route(self):
        self.respond(payload(primary=steps((1, 100), (999, 200), (3, 100))))
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_nan_lengths_sanitized(self):
        text = json.dumps(payload(primary=steps((1, 100), (2, 0), (3, 100)))).replace('"length": 0', '"length": NaN')
        self.assertIn("NaN", text)
        self.respond(text=text)
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [[1, 2, 3]])


class TestFailures(LiveMapTestCase):
    """Every failure mode ends in an empty result, never an exception."""

    def test_error_payload(self):
        self.respond({"error": "No route found|try again"})
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_connection_error(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError("unreachable")
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_timeout(self):
        self.session.get.side_effect = requests.exceptions.Timeout()
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_http_error(self):
        self.respond(text="Service Unavailable", status_code=503)
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_empty_body(self):
        self.respond(text="")
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_undecodable_body(self):
        self.respond(text="<html>oops</html>")
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_malformed_route(self):
        self.respond({"coords": [], "response": {"results": [{"length": 10}]}})
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_alternatives_not_a_list(self):
        for value in (5, True, "paths", {"response": {}}):
            self.respond({"alternatives": value})
            self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [])

    def test_malformed_path_skipped_others_kept(self):
        good = steps((1, 100), (2, 200), (3, 100))
        self.respond({
            "coords": [],
            "response": {"results": good},
            "alternatives": [{"response": {"results": [{"length": 10}]}}, "garbage", {"response": {"results": good}}],
        })
        self.assertEqual(self.client.find_routes(self.a, self.c, 5000), [[1, 2, 3], [1, 2, 3]])

    def test_segment_without_geometry(self):
        bare = Segment(segment_id=1, road_type=7, length=100, from_node_id=1, to_node_id=2)
        self.assertEqual(self.client.find_routes(bare, self.c, 5000), [])
        self.session.get.assert_not_called()

    def test_fetch_raises_with_status(self):
        self.respond(text="nope", status_code=500)
        with self.assertRaises(RoutingServiceError) as ctx:
            self.client.fetch({})
        self.assertEqual(ctx.exception.status_code, 500)


class TestRequest(LiveMapTestCase):

    def test_request_parameters(self):
        self.respond(payload())
        self.client.find_routes(self.a, self.c, 5000)

        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://www.waze.com/RoutingManager/routingRequest")
        params = kwargs["params"]
        self.assertEqual(params["nPaths"], 6)
        self.assertEqual(params["type"], "HISTORIC_TIME")
        self.assertEqual(params["vehType"], "PRIVATE")
        self.assertEqual(params["returnGeometries"], "true")
        self.assertIn("ALLOW_UTURNS:t", params["options"])
        self.assertIn("AVOID_TOLL_ROADS:f", params["options"])
        self.assertTrue(params["from"].startswith("x:"))
        self.assertIn(" y:", params["to"])
        self.assertEqual(kwargs["timeout"], 60.0)

    def test_regional_server(self):
        client = LiveMapRouteClient(self.net, BDPConfig(region="row"), session=self.session)
        self.respond(payload())
        client.find_routes(self.a, self.c, 5000)
        self.assertTrue(self.session.get.call_args[0][0].endswith("/row-RoutingManager/routingRequest"))

    def test_center_converted_to_lonlat(self):
        # A's geometry runs from x=1000 to x=1100 on the equator
        params = self.client.build_request_params(self.a, self.c)
        lon = float(params["from"].split()[0][2:])
        lat = float(params["from"].split()[1][2:])
        self.assertAlmostEqual(lon, 1050 / 6378137.0 * 57.29577951308232, places=9)
        self.assertAlmostEqual(lat, 0.0, places=9)


class TestHelpers(unittest.TestCase):

    def test_sanitize(self):
        self.assertEqual(sanitize_response_text('{"a": NaN, "b": [NaN]}'), '{"a": 0, "b": [0]}')

    def test_interior_length(self):
        self.assertEqual(interior_length([(1, 10.0), (2, 20.0), (3, 30.0), (4, 40.0)]), 50.0)
        self.assertEqual(interior_length([(1, 10.0), (2, 20.0)]), 0)
        self.assertEqual(interior_length([]), 0)


if __name__ == '__main__':
    unittest.main()
