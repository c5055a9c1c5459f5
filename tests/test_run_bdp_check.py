"""
End-to-end tests for the run_bdp_check command line.
"""

import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import network_builders  # noqa: F401  (puts the project root on sys.path)

import run_bdp_check
from bdp_core.live_map import LiveMapRouteClient


def snapshot(with_direct_link=True):
    segments = [
        {"id": 10, "roadType": 7, "length": 100, "fromNodeID": 1, "toNodeID": 2,
         "primaryStreetID": 1, "geometry": [[0, 0], [100, 0]]},
        {"id": 12, "roadType": 7, "length": 100, "fromNodeID": 3, "toNodeID": 4,
         "primaryStreetID": 1, "geometry": [[300, 0], [400, 0]]},
    ]
    if with_direct_link:
        segments.append(
            {"id": 11, "roadType": 7, "length": 200, "fromNodeID": 2, "toNodeID": 3,
             "primaryStreetID": 1, "geometry": [[100, 0], [300, 0]]}
        )
    return {"streets": [{"id": 1, "name": "Main St"}], "segments": segments}


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.addCleanup(logging.getLogger("bdp_core").handlers.clear)

    def write(self, data):
        path = Path(self.tmp.name) / "network.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def test_direct_route_found(self):
        path = self.write(snapshot())
        self.assertEqual(run_bdp_check.main([path, "10", "12", "--no-live-map"]), 0)

    def test_no_direct_route(self):
        path = self.write(snapshot(with_direct_link=False))
        self.assertEqual(run_bdp_check.main([path, "10", "12", "--no-live-map"]), 1)

    def test_unknown_segment(self):
        path = self.write(snapshot())
        self.assertEqual(run_bdp_check.main([path, "10", "99", "--no-live-map"]), 2)

    def test_missing_snapshot(self):
        missing = str(Path(self.tmp.name) / "missing.json")
        self.assertEqual(run_bdp_check.main([missing, "10", "12", "--no-live-map"]), 2)

    def test_single_segment_is_ineligible(self):
        path = self.write(snapshot())
        self.assertEqual(run_bdp_check.main([path, "10", "--no-live-map"]), 2)

    def test_country_id_selects_routing_region(self):
        path = self.write(snapshot())
        for country_id, region in ((106, "il"), (235, "na"), (73, "row")):
            with mock.patch.object(
                LiveMapRouteClient, "find_routes", autospec=True, return_value=[[10, 11, 12]]
            ) as find:
                self.assertEqual(run_bdp_check.main([path, "10", "12", "--country-id", str(country_id)]), 0)
            client = find.call_args[0][0]
            self.assertEqual(client.config.region, region)

    def test_region_and_country_id_are_exclusive(self):
        path = self.write(snapshot())
        with self.assertRaises(SystemExit):
            run_bdp_check.main([path, "10", "12", "--region", "na", "--country-id", "106"])

    def test_log_file(self):
        path = self.write(snapshot())
        log_file = Path(self.tmp.name) / "logs" / "bdp.log"
        run_bdp_check.main([path, "10", "12", "--no-live-map", "--log-file", str(log_file)])
        logging.getLogger("bdp_core").handlers[-1].close()
        self.assertIn("BDP CHECK RESULT: FOUND", log_file.read_text(encoding="utf-8"))


if __name__ == '__main__':
    unittest.main()
