# header_scanner/store.py
# in-memory registry of scans started through the API; lost on restart
store = {}


def new_scan(scan_id, target):
    store[scan_id] = {"status": "in_progress", "target": target, "report": None, "error": None, "log": None}


def get_status(scan_id):
    if scan_id not in store:
        return {"scan_id": scan_id, "status": "not_found"}
    return {"scan_id": scan_id, "status": store[scan_id]["status"]}


def get_results(scan_id):
    entry = store.get(scan_id)
    if entry is None:
        return None
    return {
        "scan_id": scan_id,
        "status": entry["status"],
        "target": entry.get("target"),
        "report": entry.get("report"),
        "error": entry.get("error"),
    }


def get_logs(scan_id):
    entry = store.get(scan_id)
    if entry is None:
        return None
    log = entry.get("log")
    return log.entries if log is not None else []
