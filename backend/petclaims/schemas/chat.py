from marshmallow import EXCLUDE, Schema, fields


class OpenRoomSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    counterpart_id = fields.Int(data_key="counterpartId", required=True)
    alert_id = fields.Int(data_key="alertId", required=True)
    # Raw: the service rejects non-string or unknown types with InvalidAlertType
    alert_type = fields.Raw(data_key="alertType", allow_none=True, load_default=None)


class SendMessageSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.Str(allow_none=True, load_default=None)


class ChatMessageSchema(Schema):
    id = fields.Int()
    room_id = fields.Int(data_key="roomId")
    sender_id = fields.Int(data_key="senderId", allow_none=True)
    content = fields.Str()
    created_at = fields.DateTime(data_key="createdAt")


message_schema = ChatMessageSchema()
messages_schema = ChatMessageSchema(many=True)
