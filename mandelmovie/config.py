import json
from typing import Any, Dict, Optional

from mandelmovie.movie.interpolate import get_easing

DEFAULT_CONFIG: Dict[str, Any] = {
    "width": 800,
    "height": 800,
    "fps": 24,
    "seconds_per_translate": 1.0,
    "seconds_per_zoom_level": 1.0,
    "frames_dir": "images/zoom",
    "output_video": "mandelbrot.mp4",
    "iterations_const": 1000,
    "iterations_linear": 100,
    "workers": 1,
    "frame_workers": 1,
    "easing": "smooth",
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError("Config JSON must be an object.")
        return cfg
    return dict(DEFAULT_CONFIG)

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(DEFAULT_CONFIG)
    out.update(cfg)

    width = int(out["width"])
    height = int(out["height"])
    fps = int(out["fps"])
    if width <= 0 or height <= 0 or fps <= 0:
        raise ValueError("width/height/fps must be positive.")

    seconds_per_translate = float(out["seconds_per_translate"])
    seconds_per_zoom_level = float(out["seconds_per_zoom_level"])
    if seconds_per_translate <= 0 or seconds_per_zoom_level <= 0:
        raise ValueError("seconds_per_translate/seconds_per_zoom_level must be positive.")

    out["width"] = width
    out["height"] = height
    out["fps"] = fps
    out["seconds_per_translate"] = seconds_per_translate
    out["seconds_per_zoom_level"] = seconds_per_zoom_level
    out["frames_dir"] = str(out["frames_dir"])
    out["output_video"] = str(out["output_video"])
    out["iterations_const"] = int(out["iterations_const"])
    out["iterations_linear"] = int(out["iterations_linear"])
    out["workers"] = max(1, int(out["workers"]))
    out["frame_workers"] = max(1, int(out["frame_workers"]))
    out["easing"] = str(out["easing"]).lower()
    get_easing(out["easing"])
    return out
