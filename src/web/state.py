import threading


class SharedState:
    """
    Singleton class to share state between the frame loop
    and the FastAPI control server.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance._init_fields()
        return cls._instance

    def _init_fields(self):
        self.session = None
        self.position_source = None
        self.geojson = None
        self.geojson_lock = threading.Lock()
        self.stats_lock = threading.Lock()
        self.system_stats = {
            "fps": 0,
            "start_time": 0,
            "last_frame_ts": None,
        }

    def reset(self):
        """Drop all attached services and cached data (used between tests)."""
        self._init_fields()

    def attach(self, session, position_source=None):
        """Attach the session controller (and optional push-able position source)."""
        self.session = session
        self.position_source = position_source

    def set_geojson(self, feature_collection):
        with self.geojson_lock:
            self.geojson = feature_collection

    def get_geojson(self):
        with self.geojson_lock:
            return self.geojson

    def update_system_stats(self, stats):
        with self.stats_lock:
            self.system_stats.update(stats)

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        with self.stats_lock:
            return dict(self.system_stats)


# Global instance
state = SharedState()
