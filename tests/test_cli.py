import json

import yaml

from cli import main, resolve_paths


def _write_routes(path, routes):
    lines = []
    for i, coords in enumerate(routes):
        payload = "[" + ", ".join(f"[{lon}, {lat}, 1480000000, 10.5]" for lon, lat in coords) + "]"
        lines.append(f'{100 + i},{i},{i + 1},DEHAM,DEBRV,t0,t1,"{payload}"\n')
    path.write_text("".join(lines), encoding="utf-8")


def _write_config(tmp_path, **output):
    cfg = {"logging": {"dir": str(tmp_path / "logs"), "level": "DEBUG"}, "output": output}
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return cfg_path


def test_resolve_paths_places_output_next_to_input():
    csv_path, out_path = resolve_paths({}, "some/dir/routes.csv", None)
    assert out_path.parent == csv_path.parent
    assert out_path.name == "DEBRV_DEHAM_avg_route.geojson"


def test_main_writes_geojson(tmp_path):
    routes = [
        [(8.5, 53.55), (8.7, 53.7 + 0.01 * i), (9.0, 53.8), (9.5, 53.7 - 0.01 * i), (9.9, 53.5)]
        for i in range(3)
    ]
    csv_path = tmp_path / "routes.csv"
    _write_routes(csv_path, routes)
    cfg_path = _write_config(tmp_path, save_csv=True)

    assert main(str(cfg_path), str(csv_path)) == 0

    out = tmp_path / "DEBRV_DEHAM_avg_route.geojson"
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data["features"][0]["geometry"]["coordinates"]) == 5
    assert (tmp_path / "DEBRV_DEHAM_avg_route.csv").exists()
    assert (tmp_path / "logs" / "average_route.log").exists()


def test_main_fails_without_usable_routes(tmp_path):
    csv_path = tmp_path / "routes.csv"
    csv_path.write_text('1,1,2,DEHAM,DEBRV,t0,t1,"garbage"\n', encoding="utf-8")
    cfg_path = _write_config(tmp_path)

    assert main(str(cfg_path), str(csv_path)) == 1
    assert not (tmp_path / "DEBRV_DEHAM_avg_route.geojson").exists()


def test_main_fails_on_missing_input(tmp_path):
    cfg_path = _write_config(tmp_path)
    assert main(str(cfg_path), str(tmp_path / "missing.csv")) == 1


def test_main_tolerates_trailing_fields(tmp_path):
    routes = [[(8.5, 53.55), (9.0, 53.8 + 0.01 * i), (9.9, 53.5)] for i in range(2)]
    csv_path = tmp_path / "routes.csv"
    _write_routes(csv_path, routes)
    with csv_path.open("a", encoding="utf-8") as fh:
        fh.write('102,2,3,DEHAM,DEBRV,t0,t1,"[[8.5, 53.55, 1480000000, 10.5], [9.0, 53.8, 1480000000, 10.5], '
                 '[9.9, 53.5, 1480000000, 10.5]]",extra\n')
    cfg_path = _write_config(tmp_path)

    assert main(str(cfg_path), str(csv_path)) == 0
    assert (tmp_path / "DEBRV_DEHAM_avg_route.geojson").exists()


def test_main_fails_on_truncated_file(tmp_path):
    csv_path = tmp_path / "routes.csv"
    csv_path.write_text('1,1,2,DEHAM,DEBRV,t0,t1,"[[8.5, 53.55, 1480000000, 10.5]\n', encoding="utf-8")
    cfg_path = _write_config(tmp_path)

    assert main(str(cfg_path), str(csv_path)) == 1
