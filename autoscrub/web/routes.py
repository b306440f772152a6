"""HTTP routes for the autoscrub filtergraph API."""

import json
import logging
import queue
import threading
import uuid
from pathlib import Path

from flask import (
    Blueprint,
    Response,
    current_app,
    jsonify,
    request,
    send_file,
)

from autoscrub.editors.speedup import truncate_silences
from autoscrub.engine import process, synthesize
from autoscrub.ffutil import ExternalToolError
from autoscrub.manifest import ConfigurationError, Manifest, ScrubConfig
from autoscrub.models import TimeRange

logger = logging.getLogger(__name__)

bp = Blueprint("web", __name__)

# In-memory job store: job_id -> job dict
_jobs: dict[str, dict] = {}

_SCRUB_FIELDS = ("min_duration", "margin", "speed", "threshold_db", "target_lufs")


def _scrub_config(data: dict) -> ScrubConfig:
    kwargs = {k: float(data[k]) for k in _SCRUB_FIELDS if k in data}
    if "normalize" in data:
        if not isinstance(data["normalize"], bool):
            raise ConfigurationError(f"normalize={data['normalize']!r} must be true or false")
        kwargs["normalize"] = data["normalize"]
    return ScrubConfig(**kwargs)


def _silences(data: list) -> list[TimeRange]:
    """Read ``[start, end]`` pairs; an end of 0 or null runs to EOF."""
    return [TimeRange.from_detection(float(start), None if end is None else float(end)) for start, end in data]


@bp.route("/api/filtergraph", methods=["POST"])
def filtergraph():
    """Synthesize a filtergraph from silences detected elsewhere."""
    body = request.get_json(silent=True) or {}
    if "silences" not in body:
        return jsonify({"error": "Request must contain 'silences'"}), 400

    try:
        config = _scrub_config(body.get("scrub", {}))
        silences = _silences(body["silences"])
        measured = body.get("measured_lufs")
        graph, gain = synthesize(
            silences, config, measured_lufs=None if measured is None else float(measured)
        )
    except ConfigurationError as e:
        return jsonify({"error": str(e)}), 400
    except (TypeError, ValueError) as e:
        return jsonify({"error": f"Malformed request: {e}"}), 400

    return jsonify({
        "filtergraph": graph,
        "gain": gain,
        "silences_sped_up": len(truncate_silences(silences)),
    })


@bp.route("/api/upload", methods=["POST"])
def upload():
    if "file" not in request.files:
        return jsonify({"error": "No file provided"}), 400

    f = request.files["file"]
    if not f.filename:
        return jsonify({"error": "Empty filename"}), 400

    job_id = uuid.uuid4().hex[:12]
    job_dir = Path(current_app.config["WORK_DIR"]) / job_id
    job_dir.mkdir(parents=True, exist_ok=True)

    ext = Path(f.filename).suffix or ".mp4"
    input_path = job_dir / f"input{ext}"
    f.save(input_path)

    _jobs[job_id] = {
        "dir": job_dir,
        "input_path": input_path,
        "filename": f.filename,
        "status": "uploaded",
    }

    return jsonify({"job_id": job_id, "filename": f.filename})


@bp.route("/api/jobs/<job_id>/process", methods=["POST"])
def start_process(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    if job["status"] not in ("uploaded", "done", "error"):
        return jsonify({"error": f"Job is already {job['status']}"}), 409

    body = request.get_json(silent=True) or {}
    try:
        config = _scrub_config(body.get("scrub", {}))
    except (ConfigurationError, TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    manifest = Manifest(input=job["input_path"], scrub=config)

    progress_queue: queue.Queue = queue.Queue()
    job["progress_queue"] = progress_queue
    job["status"] = "processing"
    job["error"] = None

    def run():
        try:
            def on_progress(stage: str, frac: float):
                progress_queue.put({"stage": stage, "progress": round(frac, 3)})

            result = process(manifest, on_progress=on_progress)
            job["result"] = {
                "output_path": str(result.output_path),
                "silences_detected": result.silences_detected,
                "silences_sped_up": result.silences_sped_up,
                "measured_lufs": result.measured_lufs,
                "gain": result.gain_db,
            }
            job["status"] = "done"
        except ExternalToolError as e:
            logger.warning("job %s: %s", job_id, e)
            job["status"] = "error"
            job["error"] = f"ffmpeg failed: {e}"
        except Exception as e:
            logger.exception("job %s failed", job_id)
            job["status"] = "error"
            job["error"] = str(e)
        finally:
            progress_queue.put(None)  # sentinel

    threading.Thread(target=run, daemon=True).start()
    return jsonify({"status": "started"})


@bp.route("/api/jobs/<job_id>/progress")
def progress_stream(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    q = job.get("progress_queue")

    if q is None:
        return jsonify({"error": "No processing in progress"}), 409

    def generate():
        while True:
            try:
                msg = q.get(timeout=120)
            except queue.Empty:
                yield "data: {\"error\": \"timeout\"}\n\n"
                break
            if msg is None:
                if job["status"] == "error":
                    data = json.dumps({"error": job["error"]})
                else:
                    data = json.dumps({
                        "stage": "complete",
                        "progress": 1.0,
                        "result": job.get("result"),
                    })
                yield f"data: {data}\n\n"
                break
            yield f"data: {json.dumps(msg)}\n\n"

    return Response(generate(), mimetype="text/event-stream")


@bp.route("/api/jobs/<job_id>/result")
def download_result(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    if job["status"] != "done":
        return jsonify({"error": "Job not complete"}), 409

    output_path = Path(job["result"]["output_path"])
    return send_file(output_path, mimetype="text/plain", as_attachment=False)


@bp.route("/api/jobs/<job_id>/status")
def job_status(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    resp = {"status": job["status"], "filename": job.get("filename")}
    if job["status"] == "done":
        resp["result"] = job.get("result")
    if job["status"] == "error":
        resp["error"] = job.get("error")
    return jsonify(resp)
