import atexit

import azure.functions as func

from tvtantrum_catalog_service.blueprints import admin_bp, categories_bp, research_bp, shows_bp, system_bp
from tvtantrum_catalog_service.blueprints.context import app_context

app = func.FunctionApp()

app.register_blueprint(shows_bp.bp)
app.register_blueprint(categories_bp.bp)
app.register_blueprint(research_bp.bp)
app.register_blueprint(admin_bp.bp)
app.register_blueprint(system_bp.bp)

atexit.register(app_context.close)
