"""Translation catalogs for wizard labels and messages."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from loguru import logger

from .config import ConfigError, LocaleConfig

RTL_LANGUAGES = frozenset({"ar"})

_CATALOGS: Dict[str, Dict[str, str]] = {
    "en": {
        "wizard.title": "New Project",
        "wizard.back": "Back",
        "wizard.next": "Next",
        "wizard.submit": "Create Project",
        "wizard.cancel": "Cancel",
        "wizard.submitting": "Creating project…",
        "wizard.created": "Project created successfully",
        "wizard.error": "Error",
        "wizard.missing": "Please fill in the required fields",
        "step.basic": "Basic Information",
        "step.type": "Project Type & Goals",
        "step.audience": "Target Audience",
        "step.details": "Project Details",
        "step.brand": "Brand Identity",
        "step.content": "Content Setup",
        "step.features": "Functionalities",
        "step.social": "Social Media",
        "step.hosting": "Hosting & Domain",
        "step.design": "Design",
        "step.timeline": "Timeline & Budget",
        "step.budget": "Budget",
        "step.contact": "Contact Information",
        "step.confirmation": "Confirmation",
        "step.review": "Review",
        "field.name": "Project Name *",
        "field.description": "Short Description *",
        "field.shortDescription": "Short Description *",
        "field.longDescription": "Detailed Description",
        "field.goal": "Main Goal",
        "field.projectType": "Project Type",
        "field.mainGoals": "Main Goals",
        "field.targetAudience": "Target Audience",
        "field.audienceAge": "Audience Age",
        "field.languages": "Website Languages",
        "field.preferredColors": "Preferred Colors",
        "field.fonts": "Preferred Fonts",
        "field.hasLogo": "I already have a logo",
        "field.inspirationWebsites": "Inspiration Websites",
        "field.sections": "Required Sections",
        "field.initialContent": "Initial Content",
        "field.needsReadyContent": "I need ready-made content",
        "field.features": "Features",
        "field.integrations": "Integrations",
        "field.socialMedia.facebook": "Facebook",
        "field.socialMedia.instagram": "Instagram",
        "field.socialMedia.twitter": "X / Twitter",
        "field.socialMedia.linkedin": "LinkedIn",
        "field.socialMedia.tiktok": "TikTok",
        "field.hasDomain": "Do you own a domain?",
        "field.domainName": "Domain Name",
        "field.needsHosting": "Do you need hosting?",
        "field.template": "Template",
        "field.styleDirection": "Style Direction",
        "field.startDate": "Start Date",
        "field.expectedDelivery": "Expected Delivery",
        "field.package": "Package",
        "field.addons": "Add-ons",
        "field.contactName": "Contact Name",
        "field.contactEmail": "Email",
        "field.contactPhone": "Phone",
        "field.preferredContact": "Preferred Contact Method",
        "field.ecommerceDetails.categories": "Product Categories",
        "field.ecommerceDetails.productCount": "Number of Products",
        "field.ecommerceDetails.paymentMethods": "Payment Methods",
        "field.ecommerceDetails.needsShipping": "Shipping required",
        "field.ecommerceDetails.hasInventorySystem": "Existing inventory system",
        "status.new": "New",
        "status.in_progress": "In Progress",
        "status.review": "Under Review",
        "status.completed": "Completed",
        "milestone.data_collection": "Data Collection",
        "milestone.initial_design": "Initial Design",
        "milestone.development": "Development",
        "milestone.testing": "Testing",
        "milestone.delivery": "Final Delivery",
        "payment.status.paid": "Paid",
        "payment.status.pending": "Awaiting payment",
        "payment.status.overdue": "Overdue",
        "payment.type.initial": "Initial payment",
        "payment.type.milestone": "Milestone payment",
        "payment.type.final": "Final payment",
        "payment.type.addon": "Add-on",
        "payment.type.other": "Payment",
        "addon.status.active": "Active",
        "addon.status.pending": "Awaiting activation",
        "addon.status.inactive": "Inactive",
        "messages.client": "Client",
        "messages.admin": "Project manager",
        "messages.empty": "No messages yet.",
        "messages.sent": "Message sent",
        "option.portfolio": "Personal Portfolio",
        "option.ecommerce": "E-commerce Store",
        "option.education": "Educational Platform",
        "option.company": "Company Website",
        "option.corporate": "Company Website",
        "option.blog": "Blog / Magazine",
        "option.saas": "SaaS Product",
        "option.landing": "Landing Page",
        "option.other": "Other",
    },
    "ar": {
        "wizard.title": "مشروع جديد",
        "wizard.back": "العودة",
        "wizard.next": "التالي",
        "wizard.submit": "إنشاء المشروع",
        "wizard.cancel": "إلغاء",
        "wizard.created": "تم إنشاء المشروع بنجاح",
        "wizard.error": "خطأ",
        "step.basic": "معلومات أساسية",
        "step.brand": "هوية البراند",
        "step.content": "المحتوى",
        "step.features": "الوظائف",
        "step.hosting": "الاستضافة",
        "step.design": "التصميم",
        "step.timeline": "الجدول الزمني",
        "step.budget": "الميزانية",
        "step.confirmation": "التأكيد",
        "field.name": "اسم المشروع *",
        "field.description": "وصف قصير *",
        "field.shortDescription": "وصف قصير *",
        "field.goal": "الهدف الأساسي",
        "field.preferredColors": "الألوان المفضلة",
        "field.fonts": "الخطوط المفضلة",
        "field.inspirationWebsites": "مواقع مشابهة للإلهام",
        "field.sections": "الأقسام المطلوبة",
        "field.initialContent": "المحتوى المبدئي",
        "field.needsReadyContent": "أحتاج محتوى جاهز",
        "status.new": "جديد",
        "status.in_progress": "قيد التنفيذ",
        "status.review": "مراجعة",
        "status.completed": "مكتمل",
        "milestone.data_collection": "تجميع البيانات",
        "milestone.initial_design": "التصميم المبدئي",
        "milestone.development": "التطوير",
        "milestone.testing": "الاختبار",
        "milestone.delivery": "التسليم النهائي",
        "payment.status.paid": "مدفوع",
        "payment.status.pending": "في انتظار الدفع",
        "payment.status.overdue": "متأخر",
        "payment.type.initial": "دفعة أولى",
        "payment.type.milestone": "دفعة مرحلية",
        "payment.type.final": "دفعة نهائية",
        "payment.type.addon": "إضافة",
        "payment.type.other": "دفعة",
        "addon.status.active": "نشط",
        "addon.status.pending": "في انتظار التفعيل",
        "addon.status.inactive": "غير نشط",
        "messages.client": "العميل",
        "messages.admin": "مدير المشروع",
        "messages.empty": "لا توجد رسائل بعد.",
        "messages.sent": "تم إرسال الرسالة بنجاح",
        "option.portfolio": "بورتفوليو شخصي",
        "option.ecommerce": "متجر إلكتروني",
        "option.education": "منصة تعليمية",
        "option.corporate": "موقع شركة",
        "option.company": "موقع شركة",
        "option.blog": "مدونة / مجلة",
        "option.landing": "صفحة هبوط",
        "option.other": "أخرى",
    },
}


def available_languages() -> List[str]:
    return list(_CATALOGS.keys())


def load_catalog(path: Path) -> Dict[str, str]:
    """Read a flat ``key: text`` YAML catalog."""

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Catalog file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse catalog {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Catalog {path} must be a mapping of keys to strings")
    return {str(key): str(value) for key, value in data.items()}


class Translator:
    """Look up labels; unknown keys come back unchanged."""

    def __init__(self, language: str = "en", overrides: Optional[Dict[str, str]] = None) -> None:
        if language not in _CATALOGS and not overrides:
            logger.warning("No catalog bundled for language '{}'", language)
        self.language = language
        self._catalog = dict(_CATALOGS.get(language, {}))
        if overrides:
            self._catalog.update(overrides)

    @property
    def is_rtl(self) -> bool:
        return self.language in RTL_LANGUAGES

    def translate(self, key: str) -> str:
        return self._catalog.get(key, key)

    __call__ = translate

    def label(self, key: str, fallback: str) -> str:
        """Translate ``key``, or return ``fallback`` when it is missing."""

        text = self._catalog.get(key)
        return text if text is not None else fallback

    def option(self, value: str) -> str:
        return self.label(f"option.{value}", value.replace("_", " ").capitalize())

    def field(self, path: str) -> str:
        leaf = path.rsplit(".", 1)[-1]
        humanized = "".join(f" {ch.lower()}" if ch.isupper() else ch for ch in leaf)
        return self.label(f"field.{path}", humanized.strip().capitalize())


def translator_for(locale: LocaleConfig, language: Optional[str] = None) -> Translator:
    """Build the translator for a locale section, applying its catalog file."""

    overrides = load_catalog(locale.catalog) if locale.catalog else None
    return Translator(language or locale.language, overrides=overrides)


__all__ = ["Translator", "available_languages", "load_catalog", "translator_for", "RTL_LANGUAGES"]
