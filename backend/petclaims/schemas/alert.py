from marshmallow import EXCLUDE, Schema, fields


class AlertCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    pet_name = fields.Str(data_key="petName", allow_none=True, load_default=None)
    species = fields.Str(allow_none=True, load_default=None)
    description = fields.Str(allow_none=True, load_default=None)
    location = fields.Str(allow_none=True, load_default=None)
    image = fields.Str(allow_none=True, load_default=None)


class AlertSchema(Schema):
    id = fields.Int(dump_only=True)
    user_id = fields.Int(data_key="ownerId")
    pet_name = fields.Str(data_key="petName", allow_none=True)
    species = fields.Str(allow_none=True)
    description = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    image = fields.Str(allow_none=True)
    status = fields.Str()
    resolution_note = fields.Str(data_key="resolutionNote", allow_none=True)
    resolved_at = fields.DateTime(data_key="resolvedAt", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")


alert_schema = AlertSchema()
