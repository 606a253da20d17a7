DEVICE_FIELDS = """
    device_id
    owner
    status
    createdAt
    updatedAt
"""

TELEMETRY_FIELDS = """
    device_id
    temperature
    humidity
    timestamp
    owner
    createdAt
    updatedAt
"""

GET_DEVICE_OWNER = """
query GetDeviceOwner($device_id: String!) {
    getDevices(device_id: $device_id) {
        owner
    }
}
"""

CREATE_TELEMETRY = f"""
mutation CreateTelemetry($input: CreateTelemetryInput!) {{
    createTelemetry(input: $input) {{{TELEMETRY_FIELDS}}}
}}
"""

LIST_DEVICES = f"""
query ListDevices($filter: ModelDevicesFilterInput, $limit: Int, $nextToken: String) {{
    listDevices(filter: $filter, limit: $limit, nextToken: $nextToken) {{
        items {{{DEVICE_FIELDS}}}
        nextToken
    }}
}}
"""

LIST_TELEMETRIES = f"""
query ListTelemetries($filter: ModelTelemetryFilterInput, $limit: Int, $nextToken: String) {{
    listTelemetries(filter: $filter, limit: $limit, nextToken: $nextToken) {{
        items {{{TELEMETRY_FIELDS}}}
        nextToken
    }}
}}
"""

CREATE_DEVICE = f"""
mutation CreateDevices($input: CreateDevicesInput!) {{
    createDevices(input: $input) {{{DEVICE_FIELDS}}}
}}
"""

DELETE_DEVICE = """
mutation DeleteDevices($input: DeleteDevicesInput!) {
    deleteDevices(input: $input) {
        device_id
    }
}
"""
