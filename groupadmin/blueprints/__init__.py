"""
Host Group Admin
Blueprint registry.
"""


def register_blueprints(app):
    """Register every API blueprint on *app*."""
    from groupadmin.blueprints.hostgroup_bp import hostgroup_bp
    from groupadmin.blueprints.usergroup_bp import usergroup_bp

    app.register_blueprint(hostgroup_bp)
    app.register_blueprint(usergroup_bp)
