from fastapi import WebSocket

from sproutify.core.logger import ws_logger


class NotebookConnectionManager:
    """Open notebook sockets grouped by tower."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(NotebookConnectionManager, cls).__new__(cls)
            cls._instance.active_connections = {}
        return cls._instance

    async def add(self, tower_id: int, websocket: WebSocket):
        if tower_id not in self.active_connections:
            self.active_connections[tower_id] = []
        self.active_connections[tower_id].append(websocket)
        ws_logger.logger.debug(f"Notebook connections for tower {tower_id}: {len(self.active_connections[tower_id])}")

    async def remove(self, tower_id: int, websocket: WebSocket):
        if tower_id in self.active_connections:
            if websocket in self.active_connections[tower_id]:
                self.active_connections[tower_id].remove(websocket)

                if not self.active_connections[tower_id]:
                    del self.active_connections[tower_id]

    async def broadcast(self, tower_id: int, data: dict):
        """Send to every notebook open on the tower."""
        if tower_id not in self.active_connections:
            return

        dead_connections = []

        for ws in list(self.active_connections[tower_id]):
            try:
                await ws.send_json(data)
            except Exception as e:
                ws_logger.log_error(f"broadcast tower={tower_id}", e)
                dead_connections.append(ws)

        for ws in dead_connections:
            await self.remove(tower_id, ws)

        ws_logger.log_broadcast(tower_id, data.get("type", "unknown"))
