"""
@file docs.py
@brief Documentation handler for the application root
@details
Serves the HTML landing page for the API: what the service does, the data
notice for the municipal road attributes, and the endpoint list.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""


def get_root_documentation() -> str:
    """
    @brief Generate the HTML content for the root documentation page

    @details
    Returns an HTML page describing:
    - System overview and capabilities
    - Data notice
    - API usage references

    @return HTML string
    """
    html_content = """<!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>RoadWatch API - Documentation</title>
        <style>
            * { margin: 0; padding: 0; box-sizing: border-box; }
            body {
                font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                line-height: 1.6;
                color: #333;
                background: linear-gradient(135deg, #2c3e50 0%, #e67e22 100%);
                min-height: 100vh;
                padding: 20px;
            }
            .container {
                max-width: 900px;
                margin: 0 auto;
                background: white;
                border-radius: 12px;
                box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3);
                overflow: hidden;
            }
            .header {
                background: linear-gradient(135deg, #2c3e50 0%, #e67e22 100%);
                color: white;
                padding: 40px;
                text-align: center;
            }
            .header h1 { font-size: 2.5em; margin-bottom: 10px; }
            .content { padding: 40px; }
            h2 { color: #2c3e50; margin-top: 30px; border-bottom: 2px solid #e67e22; padding-bottom: 10px; }
            p { margin-bottom: 15px; color: #555; }
            .footer {
                background: #f9f9f9;
                padding: 20px;
                text-align: center;
                color: #999;
                font-size: 0.9em;
                border-top: 1px solid #eee;
            }
            .warning {
                background: #fff3cd; color: #856404; border: 1px solid #ffeaa7;
                padding: 15px; border-radius: 6px; margin: 20px 0;
            }
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>🛣️ RoadWatch API</h1>
                <p>Road Damage Reconciliation &amp; Repair Prioritization</p>
            </div>

            <div class="content">
                <h2>📋 Overview</h2>
                <p>RoadWatch maps geotagged road-damage observations onto a reference road network,
                reconstructs the roads a survey vehicle travelled, and ranks roads for repair with an
                AHP (Analytic Hierarchy Process) priority score.</p>

                <div class="warning">
                    <strong>⚠️ Data Notice</strong><br>
                    <p style="margin-top: 10px; font-size: 0.95em;">
                    Priority scores are decision support only. Road attributes (pavement, pipes, drainage)
                    come from the configured network file and must be verified against the road administrator's records.
                    </p>
                </div>

                <h2>🔑 Capabilities</h2>
                <ul>
                    <li><strong>Snapping:</strong> nearest road for any coordinate</li>
                    <li><strong>Path reconciliation:</strong> ordered roads of a trajectory, with gap flags</li>
                    <li><strong>Grouping:</strong> worst-case observation per road, intersection markers</li>
                    <li><strong>Prioritization:</strong> 9-criterion AHP score per road</li>
                </ul>

                <h2>🔌 API Access</h2>
                <ul>
                    <li><code>GET /roads</code> - Road network with priority scores</li>
                    <li><code>GET /roads/scores</code> - Priority score per road</li>
                    <li><code>GET /roads/by-id/{road_id}</code> - Score breakdown of one road</li>
                    <li><code>GET /ahp/model</code> - Criterion weights and consistency ratio</li>
                    <li><code>POST /snap</code> - Snap one coordinate</li>
                    <li><code>POST /paths/reconcile</code> - Reconcile a trajectory</li>
                    <li><code>POST /observations/group</code> - Group observations by road</li>
                    <li><code>POST /observations/statistics</code> - Damage band counts</li>
                    <li><code>GET /statistics</code> - Priority band counts</li>
                    <li><code>GET /network/topology</code> - Endpoint connectivity diagnostics</li>
                    <li><code>POST /network/reload</code> - Re-read the road network file</li>
                </ul>
                <p>Interactive API docs are served at <code>/api/docs</code>.</p>

                <h2>⚠️ Status &amp; Maintenance</h2>
                <p>System health is monitored via <code>/health</code>, <code>/health/ready</code> and <code>/health/live</code>.</p>
            </div>

            <div class="footer">
                <p>RoadWatch Platform | Road Damage Assessment</p>
            </div>
        </div>
    </body>
    </html>
    """
    return html_content
