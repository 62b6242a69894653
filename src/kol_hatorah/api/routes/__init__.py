from kol_hatorah.api.routes.ask import ask_bp
from kol_hatorah.api.routes.quotes import quotes_bp
from kol_hatorah.api.routes.monitoring import monitoring_bp

__all__ = ['ask_bp', 'quotes_bp', 'monitoring_bp']
