"""
Notification Templates

Static SMS, email and WhatsApp texts per notification kind, plus the
placeholder renderer. Placeholders use ``{{identifier}}`` syntax
(letters, digits and underscore, case-sensitive).
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from app.core.notifications.models import NotificationKind, TemplateValue

TOKEN_PATTERN = re.compile(r"\{\{(\w+)\}\}", re.ASCII)


@dataclass(frozen=True)
class Template:
    """Texts for one notification kind."""

    sms_text: str
    email_subject: str
    email_body: str
    whatsapp_text: str


def render(template: str, data: Mapping[str, TemplateValue]) -> str:
    """Substitute ``{{key}}`` tokens with values from data.

    Tokens whose key is missing are left untouched.

    Example:
        >>> render("Hi {{name}}, see {{x}}", {"name": "Asha"})
        'Hi Asha, see {{x}}'
    """

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in data:
            return match.group(0)
        return str(data[key])

    return TOKEN_PATTERN.sub(_replace, template)


def _body(text: str) -> str:
    return text.strip("\n")


_TEMPLATES: dict[NotificationKind, Template] = {
    NotificationKind.APPOINTMENT_REMINDER: Template(
        sms_text=(
            "Reminder: Your appointment with Dr. {{doctorName}} is scheduled "
            "for {{date}} at {{time}}. {{hospitalName}}"
        ),
        email_subject="Appointment Reminder - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

This is a reminder that you have an appointment scheduled:

Doctor: Dr. {{doctorName}}
Date: {{date}}
Time: {{time}}
Department: {{department}}

Please arrive 15 minutes early for registration.

If you need to reschedule, please contact us at {{contactNumber}}.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Appointment Reminder*

Dear {{patientName}},

Your appointment is scheduled:
*Doctor:* Dr. {{doctorName}}
*Date:* {{date}}
*Time:* {{time}}
*Department:* {{department}}

Please arrive 15 minutes early.
To reschedule: {{contactNumber}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.APPOINTMENT_CONFIRMATION: Template(
        sms_text=(
            "Confirmed: Your appointment with Dr. {{doctorName}} on {{date}} "
            "at {{time}}. Ref: {{appointmentId}}. {{hospitalName}}"
        ),
        email_subject="Appointment Confirmed - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Your appointment has been confirmed:

Reference Number: {{appointmentId}}
Doctor: Dr. {{doctorName}}
Date: {{date}}
Time: {{time}}
Department: {{department}}

Location: {{hospitalAddress}}

Please bring your ID and any previous medical records.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Appointment Confirmed*

Dear {{patientName}},

*Ref:* {{appointmentId}}
*Doctor:* Dr. {{doctorName}}
*Date:* {{date}}
*Time:* {{time}}
*Location:* {{hospitalAddress}}

Please bring your ID and medical records.

_{{hospitalName}}_
"""),
    ),
    NotificationKind.APPOINTMENT_CANCELLED: Template(
        sms_text=(
            "Your appointment with Dr. {{doctorName}} on {{date}} has been "
            "cancelled. Please reschedule. {{hospitalName}}"
        ),
        email_subject="Appointment Cancelled - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Your appointment has been cancelled:

Doctor: Dr. {{doctorName}}
Original Date: {{date}}
Original Time: {{time}}

Reason: {{reason}}

Please contact us to reschedule at {{contactNumber}}.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Appointment Cancelled*

Dear {{patientName}},

Your appointment with Dr. {{doctorName}} on {{date}} at {{time}} has been cancelled.
*Reason:* {{reason}}

To reschedule: {{contactNumber}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.LAB_RESULT_READY: Template(
        sms_text=(
            "Your lab results are ready. Visit {{hospitalName}} or access via "
            "patient portal. Ref: {{orderId}}"
        ),
        email_subject="Lab Results Ready - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Your laboratory test results are now available.

Order Reference: {{orderId}}
Tests: {{testNames}}

You can:
1. Visit the hospital to collect your reports
2. Access them via our patient portal

If you have any questions about your results, please consult with your doctor.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Lab Results Ready*

Dear {{patientName}},

*Order Ref:* {{orderId}}
*Tests:* {{testNames}}

Collect them at the hospital or through the patient portal.

_{{hospitalName}}_
"""),
    ),
    NotificationKind.CRITICAL_VALUE_ALERT: Template(
        sms_text=(
            "URGENT: Critical lab value detected for patient {{patientName}} "
            "({{mrn}}). {{testName}}: {{value}}. Immediate review required."
        ),
        email_subject="CRITICAL VALUE ALERT - Immediate Action Required",
        email_body=_body("""
CRITICAL VALUE ALERT

Patient: {{patientName}}
MRN: {{mrn}}
Test: {{testName}}
Result: {{value}} {{unit}}
Normal Range: {{normalRange}}

This value requires immediate clinical review and action.

Time Detected: {{timestamp}}
Performing Lab: {{labName}}

Please acknowledge receipt and document action taken.

This is an automated alert from {{hospitalName}}.
"""),
        whatsapp_text=_body("""
*CRITICAL VALUE ALERT*

*Patient:* {{patientName}}
*MRN:* {{mrn}}
*Test:* {{testName}}
*Result:* {{value}} {{unit}}
*Normal Range:* {{normalRange}}
*Lab:* {{labName}}

Please acknowledge and document action taken.

_{{hospitalName}}_
"""),
    ),
    NotificationKind.DISCHARGE_SUMMARY: Template(
        sms_text=(
            "Your discharge summary from {{hospitalName}} is ready. Please "
            "collect it from the medical records department."
        ),
        email_subject="Discharge Summary - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Your discharge summary is ready.

Admission Date: {{admissionDate}}
Discharge Date: {{dischargeDate}}
Treating Doctor: Dr. {{doctorName}}

Follow-up Instructions:
{{followUpInstructions}}

Medications:
{{medications}}

If you have any questions, please contact us at {{contactNumber}}.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Discharge Summary Ready*

Dear {{patientName}},

*Follow-up:*
{{followUpInstructions}}

*Medications:*
{{medications}}

Contact: {{contactNumber}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.PRESCRIPTION_READY: Template(
        sms_text=(
            "Your prescription is ready for pickup at {{hospitalName}} "
            "Pharmacy. Token: {{token}}"
        ),
        email_subject="Prescription Ready for Pickup - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Your prescription is ready for pickup at our pharmacy.

Token Number: {{token}}
Prescribing Doctor: Dr. {{doctorName}}
Pharmacy Hours: {{pharmacyHours}}
Location: {{pharmacyLocation}}

Please bring your ID and this email for verification.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Prescription Ready*

Dear {{patientName}},

*Token:* {{token}}

Bring your ID for verification.

_{{hospitalName}}_
"""),
    ),
    NotificationKind.PAYMENT_RECEIPT: Template(
        sms_text=(
            "Payment of Rs.{{amount}} received. Receipt No: {{receiptNumber}}. "
            "Balance: Rs.{{balance}}. {{hospitalName}}"
        ),
        email_subject="Payment Receipt - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Thank you for your payment.

Receipt Number: {{receiptNumber}}
Amount Paid: Rs. {{amount}}
Payment Mode: {{paymentMode}}
Date: {{date}}

Invoice Number: {{invoiceNumber}}
Previous Balance: Rs. {{previousBalance}}
Current Balance: Rs. {{balance}}

For any queries, contact our billing department.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Payment Received*

Dear {{patientName}},

*Receipt:* {{receiptNumber}}
*Amount:* Rs. {{amount}}
*Invoice:* {{invoiceNumber}}
*Balance:* Rs. {{balance}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.BILL_GENERATED: Template(
        sms_text=(
            "Bill generated. Amount: Rs.{{amount}}. Invoice: {{invoiceNumber}}. "
            "Pay at {{hospitalName}} billing counter."
        ),
        email_subject="Invoice Generated - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Your invoice has been generated:

Invoice Number: {{invoiceNumber}}
Date: {{date}}
Total Amount: Rs. {{amount}}

Payment Options:
- Cash at billing counter
- Card payment
- UPI: {{upiId}}
- Online: {{paymentLink}}

Payment Due By: {{dueDate}}

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Invoice Generated*

Dear {{patientName}},

*Invoice:* {{invoiceNumber}}
*Amount:* Rs. {{amount}}

UPI: {{upiId}}
Online: {{paymentLink}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.PASSWORD_RESET: Template(
        sms_text=(
            "Your OTP for password reset is {{otp}}. Valid for 10 minutes. "
            "Do not share. {{hospitalName}}"
        ),
        email_subject="Password Reset Request - {{hospitalName}}",
        email_body=_body("""
Dear {{userName}},

You have requested to reset your password.

Your OTP is: {{otp}}

This OTP is valid for 10 minutes.

If you did not request this, please contact IT support immediately.

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Password Reset*

Dear {{userName}},

Your OTP: *{{otp}}*
Valid for 10 minutes. Do not share it.

_{{hospitalName}}_
"""),
    ),
    NotificationKind.EMERGENCY_ALERT: Template(
        sms_text=(
            "EMERGENCY: {{patientName}} admitted to {{hospitalName}} "
            "Emergency. Contact: {{contactNumber}}"
        ),
        email_subject="Emergency Admission Alert - {{hospitalName}}",
        email_body=_body("""
EMERGENCY NOTIFICATION

Patient {{patientName}} has been admitted to our Emergency Department.

Time: {{timestamp}}
Triage Level: {{triageLevel}}
Location: {{location}}

Please contact us immediately at {{contactNumber}}.

{{hospitalName}}
"""),
        whatsapp_text=_body("""
*EMERGENCY ALERT*

Patient *{{patientName}}* admitted to Emergency.
*Time:* {{timestamp}}
*Location:* {{location}}

Contact: {{contactNumber}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.ADMISSION_NOTIFICATION: Template(
        sms_text=(
            "Patient {{patientName}} admitted to {{hospitalName}}. Room: "
            "{{roomNumber}}, Ward: {{wardName}}. Contact: {{contactNumber}}"
        ),
        email_subject="Admission Notification - {{hospitalName}}",
        email_body=_body("""
Dear Family/Guardian,

This is to inform you that {{patientName}} has been admitted.

Admission Details:
- Admission Date: {{admissionDate}}
- Room/Bed: {{roomNumber}} / {{bedNumber}}
- Ward: {{wardName}}
- Admitting Doctor: Dr. {{doctorName}}

Visiting Hours: {{visitingHours}}

For any queries, please contact: {{contactNumber}}

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Admission Notification*

Dear Family/Guardian,

*{{patientName}}* has been admitted.
*Room/Bed:* {{roomNumber}} / {{bedNumber}}
*Ward:* {{wardName}}
*Visiting Hours:* {{visitingHours}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.SURGERY_SCHEDULED: Template(
        sms_text=(
            "Surgery scheduled for {{patientName}} on {{date}} at {{time}}. "
            "Report to OT Reception. {{hospitalName}}"
        ),
        email_subject="Surgery Scheduled - {{hospitalName}}",
        email_body=_body("""
Dear {{patientName}},

Your surgery has been scheduled:

Procedure: {{procedureName}}
Date: {{date}}
Time: {{time}}
Surgeon: Dr. {{surgeonName}}

Pre-operative Instructions:
{{preOpInstructions}}

Please report to OT Reception 2 hours before the scheduled time.

Contact: {{contactNumber}}

Best regards,
{{hospitalName}}
"""),
        whatsapp_text=_body("""
*Surgery Scheduled*

Dear {{patientName}},

*Procedure:* {{procedureName}}
*Date:* {{date}}
*Time:* {{time}}
*Surgeon:* Dr. {{surgeonName}}

{{preOpInstructions}}

_{{hospitalName}}_
"""),
    ),
    NotificationKind.BLOOD_REQUEST_URGENT: Template(
        sms_text=(
            "URGENT: Blood ({{bloodGroup}}) needed for {{patientName}} at "
            "{{hospitalName}}. Contact: {{contactNumber}}"
        ),
        email_subject="URGENT Blood Requirement - {{hospitalName}}",
        email_body=_body("""
URGENT BLOOD REQUIREMENT

Patient: {{patientName}}
Blood Group Required: {{bloodGroup}}
Units Needed: {{units}}
Hospital: {{hospitalName}}

If you or anyone you know can donate, please contact:
Phone: {{contactNumber}}
Blood Bank: {{bloodBankLocation}}

Thank you for saving a life.

{{hospitalName}}
"""),
        whatsapp_text=_body("""
*URGENT BLOOD REQUIREMENT*

*Blood Group:* {{bloodGroup}}
*Units:* {{units}}
*Patient:* {{patientName}}

If you can donate, please contact {{contactNumber}}.

_{{hospitalName}}_
"""),
    ),
}

# Read-only view; the registry is fixed for the process lifetime.
TEMPLATES: Mapping[NotificationKind, Template] = MappingProxyType(_TEMPLATES)


def get_template(kind: NotificationKind) -> Optional[Template]:
    """Look up the template set for a notification kind."""
    return TEMPLATES.get(kind)
