from __future__ import annotations

import logging
import math
import time

from fastapi import FastAPI
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware

from configs.appconfig import SAMPLE_STEP_DEGREES
from configs.link_models import AssemblyMode
from configs.link_models import LinkageConfig
from configs.link_models import config_from_params
from fourbar_tools.kinematic import classify_grashof
from fourbar_tools.kinematic import solution_table
from fourbar_tools.kinematic import solve_position
from fourbar_tools.trajectory_utils import TrajectoryCache
from fourbar_tools.trajectory_utils import find_valid_ranges

logger = logging.getLogger(__name__)


def sanitize_for_json(obj):
    """
    Recursively sanitize an object for JSON serialization.

    Converts inf/-inf to string "Infinity"/"-Infinity" and nan to null, so an
    unassemblable pose serializes its undefined coordinates as null.
    """
    if isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    elif isinstance(obj, bool) or obj is None or isinstance(obj, str):
        return obj
    elif isinstance(obj, float):
        if math.isinf(obj):
            return 'Infinity' if obj > 0 else '-Infinity'
        elif math.isnan(obj):
            return None
        return obj
    elif hasattr(obj, '__float__'):  # numpy types
        val = float(obj)
        if math.isinf(val):
            return 'Infinity' if val > 0 else '-Infinity'
        elif math.isnan(val):
            return None
        return val
    return obj


def _parse_request(request: dict) -> tuple[LinkageConfig, AssemblyMode]:
    """Pull the config and assembly mode out of a request body."""
    config = LinkageConfig(**request.get('config', {}))
    mode = AssemblyMode.parse(request.get('mode', AssemblyMode.OPEN))
    return config, mode


app = FastAPI(title='Fourbar API')

# Simple CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

# Shared across requests; keyed on geometry + mode only
trajectory_cache = TrajectoryCache()


@app.get('/')
def root():
    return {'message': 'Fourbar API is running'}


@app.get('/status')
def get_status():
    return {
        'status': 'operational',
        'message': 'Fourbar backend is running successfully',
    }


@app.get('/config')
def get_config(request: Request):
    """
    Build a config from query-string parameters.

    Every field is optional; missing or bad values fall back to the defaults.
    Example: /config?r1=2&r2=0.5&beta=abc
    """
    config = config_from_params(dict(request.query_params))
    return {
        'status': 'success',
        'config': config.as_dict(),
    }


@app.post('/solve')
def solve_linkage(request: dict):
    """
    Solve a single pose.

    Request body:
        {
            "config": {"r1": 1, "r2": 2, "r3": 3.5, "r4": 4, "r6": 2.236, "beta": 26.57, "theta2": 30},
            "mode": "open"            # Optional, "open" | "crossed" | 1 | -1
        }

    Returns:
        {
            "status": "success",
            "pose": {"a": [x, y], "b": [x, y], "c": [x, y], "theta3": ..., "is_valid": ...}
        }
        Coordinates of an unassemblable pose are null.
    """
    try:
        config, mode = _parse_request(request)
        pose = solve_position(config, mode)
        return sanitize_for_json({
            'status': 'success',
            'pose': pose.to_dict(),
        })

    except Exception as e:
        logger.exception('Solve request failed')
        return {
            'status': 'error',
            'message': f'Failed to solve linkage: {str(e)}',
        }


@app.post('/sample')
def sample_linkage(request: dict):
    """
    Sample the coupler trajectory over a full driver revolution.

    Request body:
        {
            "config": {...},
            "mode": "open",           # Optional
            "step_degrees": 2.0       # Optional
        }

    Returns:
        {
            "status": "success",
            "samples": [{"theta2", "theta3", "theta4", "cx", "cy"}, ...],
            "n_samples": 181,
            "valid_ranges": [[0.0, 360.0]],
            "execution_time_ms": 1.2
        }
    """
    try:
        start_time = time.perf_counter()

        config, mode = _parse_request(request)
        step = request.get('step_degrees', SAMPLE_STEP_DEGREES)

        samples = trajectory_cache.get(config, mode, step)
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f'Sampled {len(samples)} poses ({mode.value}, step={step}) in {elapsed_ms:.2f}ms')

        return sanitize_for_json({
            'status': 'success',
            'samples': [s.to_dict() for s in samples],
            'n_samples': len(samples),
            'valid_ranges': find_valid_ranges(samples, step),
            'execution_time_ms': elapsed_ms,
        })

    except Exception as e:
        logger.exception('Sample request failed')
        return {
            'status': 'error',
            'message': f'Failed to sample trajectory: {str(e)}',
        }


@app.post('/solution-table')
def get_solution_table(request: dict):
    """
    Tabulate theta3/theta4 at reference driver angles.

    Request body:
        {"config": {...}, "mode": "open", "angles": [0, 90, 180, -90]}   # angles optional
    """
    try:
        config, mode = _parse_request(request)
        if request.get('angles') is not None:
            rows = solution_table(config, mode, request['angles'])
        else:
            rows = solution_table(config, mode)
        return sanitize_for_json({
            'status': 'success',
            'rows': rows,
        })

    except Exception as e:
        logger.exception('Solution table request failed')
        return {
            'status': 'error',
            'message': f'Failed to build solution table: {str(e)}',
        }


@app.post('/classify')
def classify_linkage(request: dict):
    """Report the Grashof class of the mechanism in the request body."""
    try:
        config, _ = _parse_request(request)
        grashof = classify_grashof(config)
        return {
            'status': 'success',
            'grashof_type': grashof.value,
            'is_grashof': grashof.is_grashof,
        }

    except Exception as e:
        logger.exception('Classify request failed')
        return {
            'status': 'error',
            'message': f'Failed to classify linkage: {str(e)}',
        }
