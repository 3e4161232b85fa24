from marshmallow import EXCLUDE, Schema, fields, pre_load, validate


class VerificationDetailsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    microchip_number = fields.Str(data_key="microchipNumber", allow_none=True, load_default=None)
    pet_features = fields.Str(data_key="petFeatures", allow_none=True, load_default="")
    additional_info = fields.Str(data_key="additionalInfo", allow_none=True, load_default=None)


class ClaimSubmitSchema(Schema):
    """POST /claims body. Semantic checks (alert type, evidence) happen in the service."""

    class Meta:
        unknown = EXCLUDE

    alert_id = fields.Int(data_key="alertId", required=True, strict=False)
    # Raw: the service rejects non-string or unknown types with InvalidAlertType
    alert_type = fields.Raw(data_key="alertType", allow_none=True, load_default=None)
    verification_details = fields.Nested(VerificationDetailsSchema, data_key="verificationDetails", allow_none=True, load_default=dict)
    verification_images = fields.List(fields.Str(), data_key="verificationImages", allow_none=True, load_default=list)

    @pre_load
    def _single_image(self, data, **kwargs):
        # Multipart-style clients send a lone string instead of a list
        images = data.get("verificationImages") if isinstance(data, dict) else None
        if isinstance(images, str):
            data = dict(data)
            data["verificationImages"] = [images]
        return data


class ClaimTransitionSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    target_status = fields.Str(data_key="targetStatus", required=True)
    comment = fields.Str(allow_none=True, load_default=None)
    rejection_reason = fields.Str(data_key="rejectionReason", allow_none=True, load_default=None)
    meeting_location = fields.Str(data_key="meetingLocation", allow_none=True, load_default=None)
    meeting_date = fields.DateTime(data_key="meetingDate", allow_none=True, load_default=None)
    meeting_notes = fields.Str(data_key="meetingNotes", allow_none=True, load_default=None)

    @pre_load
    def _accept_status_alias(self, data, **kwargs):
        # Older clients post {status: ...}
        if isinstance(data, dict) and "targetStatus" not in data and "status" in data:
            data = dict(data)
            data["targetStatus"] = data.pop("status")
        return data


class ClaimVerifySchema(ClaimTransitionSchema):
    target_status = fields.Str(data_key="targetStatus", load_default=None)
    action = fields.Str(required=True, validate=validate.OneOf(["APPROVE", "REJECT"], error="Invalid action. Use APPROVE or REJECT"))


class ClaimSchema(Schema):
    id = fields.Int(dump_only=True)
    alert_id = fields.Int(data_key="alertId")
    alert_type = fields.Str(data_key="alertType")
    claimant_id = fields.Int(data_key="claimantId")
    owner_id = fields.Int(data_key="ownerId")
    status = fields.Str()
    version = fields.Int()
    verification_details = fields.Dict(data_key="verificationDetails")
    verification_images = fields.List(fields.Str(), data_key="verificationImages")
    verified_at = fields.DateTime(data_key="verifiedAt")
    rejection_reason = fields.Str(data_key="rejectionReason", allow_none=True)
    meeting_location = fields.Str(data_key="meetingLocation", allow_none=True)
    meeting_date = fields.DateTime(data_key="meetingDate", allow_none=True)
    meeting_notes = fields.Str(data_key="meetingNotes", allow_none=True)
    completed_at = fields.DateTime(data_key="completedAt")
    cancelled_at = fields.DateTime(data_key="cancelledAt")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class ClaimHistorySchema(Schema):
    id = fields.Int()
    status = fields.Str()
    actor_id = fields.Int(data_key="actorId", allow_none=True)
    comment = fields.Str(allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")


claim_schema = ClaimSchema()
claims_schema = ClaimSchema(many=True)
history_schema = ClaimHistorySchema(many=True)
