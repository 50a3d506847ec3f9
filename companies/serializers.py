from rest_framework import serializers
from internships import workflow

DECISION_CHOICES = [
    (workflow.APPROVED, 'Onaylandı'),
    (workflow.REJECTED, 'Reddedildi'),
]


class CompanyLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(max_length=8)


class CompanyDecisionSerializer(CompanyLoginSerializer):
    onay_durumu = serializers.ChoiceField(choices=DECISION_CHOICES)
    red_sebebi = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, attrs):
        if attrs['onay_durumu'] == workflow.REJECTED and not attrs.get('red_sebebi', '').strip():
            raise serializers.ValidationError({'red_sebebi': "Red sebebi zorunludur."})
        return attrs

    @property
    def decision(self):
        if self.validated_data['onay_durumu'] == workflow.APPROVED:
            return workflow.APPROVE
        return workflow.REJECT


class ApplicationDecisionSerializer(CompanyDecisionSerializer):
    basvuru_id = serializers.IntegerField()


class LogbookDecisionSerializer(CompanyDecisionSerializer):
    defter_id = serializers.IntegerField()
