import json
import logging
import os

from flask import Flask, request
from flask_cors import CORS

import trendtable.data_configuration as data_config
import trendtable.table_builder as table_builder
import trendtable.validator as validator
from trendtable.constants import PERIOD_MONTH
from trendtable.trend_table import TrendTable

app = Flask(__name__)

cors = CORS(app, resources={r"/*": {"origins": "*"}})


def _error_message(error):
    # KeyError wraps its message in quotes when converted with str()
    return str(error.args[0]) if isinstance(error, KeyError) and error.args else str(error)


def _json_response(body, status):
    return app.response_class(
        response=json.dumps(body, indent=4, cls=table_builder.Encoder),
        status=status,
        mimetype='application/json'
    )


@app.route('/get-trend-table', methods=['POST'])
def get_trend_table():
    """
    A flask endpoint, build the heatmap trend table for the given shape data json and config yaml file.
    :return: A json response for the frontend to render the table
    """
    if 'configfile' not in request.files or 'datafile' not in request.files:
        return _json_response({"description": "Both 'configfile' and 'datafile' must be provided"}, 400)

    try:
        cfg = table_builder.load_yaml_from_stream(request.files['configfile'])
        shape_data = table_builder.load_shape_data_from_stream(request.files['datafile'])
    except ValueError as e:
        return _json_response({"description": _error_message(e)}, 400)

    try:
        table = process_input(cfg, shape_data)
    except ValueError as e:
        return _json_response({"description": _error_message(e)}, 400)
    except Exception as e:
        logging.error(e, exc_info=True)
        return _json_response({"description": _error_message(e)}, 500)

    return _json_response(table, 200)


def process_input(cfg, shape_data):
    try:
        trend_table_validator = validator.TrendTableValidator(cfg, shape_data)
        trend_table_validator.validate()
    except (KeyError, ValueError) as e:
        logging.error("Configuration validation failed", exc_info=True)
        raise ValueError(f"Invalid configuration provided: {_error_message(e)}")

    try:
        trend_table = TrendTable(cfg, shape_data)
    except Exception as error:
        logging.error(error, exc_info=True)
        raise RuntimeError(f"Could not create the trend table due to: {_error_message(error)}")

    try:
        table = table_builder.get_trend_table(trend_table)
    except Exception as err:
        logging.error(err, exc_info=True)
        raise RuntimeError(f"Error while creating the heatmap table, caused by: {_error_message(err)}")

    return table


@app.route('/heatmap-data-configuration', methods=['POST'])
def get_data_configuration():
    """
    Builds the data configuration the host client uses to fetch the table's data.

    Expects a json body with 'metric' (a metric field id), optionally 'dimension',
    'groupBy' and 'fieldsetId'.
    """
    selection = request.get_json(silent=True) or {}
    if 'metric' not in selection:
        return _json_response({"description": "A 'metric' must be selected"}, 400)

    try:
        configuration = data_config.build_data_configuration(
            selection['metric'],
            dimension=selection.get('dimension'),
            group_by=selection.get('groupBy') or PERIOD_MONTH,
            fieldset_id=selection.get('fieldsetId')
        )
    except (KeyError, ValueError) as e:
        return _json_response({"description": _error_message(e)}, 400)

    return _json_response(configuration, 200)


def start():
    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=False, port=int(os.environ.get("PORT", 5001)), host='0.0.0.0')
